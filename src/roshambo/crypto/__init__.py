"""Cryptographic primitives — commit hashes, content addresses, nonces."""

from roshambo.crypto.commit import (
    HASH_PREFIX,
    canonical_json,
    commit,
    content_address,
    generate_nonce,
    verify,
)

__all__ = [
    "HASH_PREFIX",
    "canonical_json",
    "commit",
    "content_address",
    "generate_nonce",
    "verify",
]
