"""Mock interview coach backend."""
