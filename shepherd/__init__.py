"""shepherd: manage a fleet of local Git repositories."""

__version__ = "0.1.0"
