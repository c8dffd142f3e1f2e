"""Product catalog service with a multi-index filter engine."""

__version__ = "0.1.0"
