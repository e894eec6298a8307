"""Full-text search for pasted game crash logs."""

__version__ = "0.1.0"
