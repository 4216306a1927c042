"""Paper trading ledger service."""

__version__ = "0.1.0"
