"""Push notification worker and subscription management for the Wellio web app."""

__version__ = "0.1.0"
