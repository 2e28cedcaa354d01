"""Directory inventory and documentation drift detection."""

__version__ = "0.1.0"
