"""Turf availability and booking engine"""

__version__ = "1.0.0"
