"""TCP client and server exchanging length-prefixed messages and packages of text values."""

__version__ = "0.1.0"
__all__ = ["client", "protocol", "server"]