"""Stack Exchange topic graph analytics."""

__version__ = "0.1.0"
