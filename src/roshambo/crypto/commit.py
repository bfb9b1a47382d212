"""Hash commitment utility — canonical hashing and nonce generation.

commit(value) is pure and deterministic: the value is rendered as
canonical JSON (sorted keys, UTF-8, no insignificant whitespace) and
hashed with SHA-256. Digests carry a ``sha256:`` prefix.

Nonces are drawn from ``secrets`` so a small component space (three
moves in classic rock/paper/scissors) cannot be recovered from the
commit hash by enumeration.
"""

from __future__ import annotations

import hashlib
import json
import secrets
import string
from typing import Any

HASH_PREFIX = "sha256:"
NONCE_ALPHABET = string.ascii_letters + string.digits
MIN_NONCE_LENGTH = 24


def canonical_json(value: Any) -> bytes:
    """Serialize a value canonically for hashing.

    Objects exposing ``to_dict()`` are converted first.
    """
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    return json.dumps(
        value,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def commit(value: Any) -> str:
    """Return the ``sha256:`` digest of a value's canonical encoding."""
    digest = hashlib.sha256(canonical_json(value)).hexdigest()
    return f"{HASH_PREFIX}{digest}"


def verify(value: Any, digest: str) -> bool:
    """True if ``commit(value)`` equals the given digest."""
    return secrets.compare_digest(commit(value), digest)


def content_address(entry_type: str, author: str, content: dict[str, Any]) -> str:
    """Content address of a ledger record: hash of its type, author and content.

    The author is part of the address, so identical content submitted by
    two identities is stored as two records.
    """
    return commit({"entry_type": entry_type, "author": author, "content": content})


def generate_nonce(length: int = MIN_NONCE_LENGTH) -> str:
    """Generate a cryptographically random alphanumeric nonce."""
    if length < MIN_NONCE_LENGTH:
        raise ValueError(
            f"Nonce length must be at least {MIN_NONCE_LENGTH}, got {length}"
        )
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(length))
