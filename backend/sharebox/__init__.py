"""Sharebox: personal file sharing with live folder connections."""

__version__ = "0.1.0"
