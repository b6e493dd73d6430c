"""News Pulse multilingual news portal frontend."""

__version__ = "0.1.0"
