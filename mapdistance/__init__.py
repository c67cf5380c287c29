"""MapDistance AI: grounded distance estimates between two place names."""

__version__ = "0.1.0"
