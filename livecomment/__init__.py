"""Live-stream comment service."""

__version__ = "0.1.0"
