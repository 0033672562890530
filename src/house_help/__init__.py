"""House help tracker: attendance ledger, monthly salary and share links."""

__version__ = "0.1.0"
