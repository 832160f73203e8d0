"""nencho - Year-end withholding (年末調整) record checker."""

__version__ = "0.1.0"
