"""OSINT Cafe: multi-provider safety analysis with graceful degradation."""

__version__ = "0.1.0"
