"""Search index adapters."""
