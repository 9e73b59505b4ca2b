"""Build unsigned Stellar transactions and broadcast signed ones."""

__version__ = "0.1.0"
