"""Shiftboard: slot-based shift scheduling service."""

__version__ = "0.1.0"
