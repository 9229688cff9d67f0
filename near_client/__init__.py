"""Desktop test client for the NEAR JSON-RPC API."""

__version__ = "0.1.0"
