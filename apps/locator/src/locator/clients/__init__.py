"""HTTP clients for external location and point-of-interest services."""
