"""Fleet driver settlement calculation for TVDE operators."""

__version__ = "0.1.0"
