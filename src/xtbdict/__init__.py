"""xtbdict: offline dictionary bundle builder for XTBook."""

__all__ = ["__version__"]

__version__ = "0.1.0"
