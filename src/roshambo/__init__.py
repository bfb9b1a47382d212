"""Roshambo — commit-reveal games over a shared content-addressed ledger."""

__version__ = "0.1.0"
