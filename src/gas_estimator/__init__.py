"""Gas limit estimation service for Ethereum-style transactions."""

__version__ = "0.1.0"
