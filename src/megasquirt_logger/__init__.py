"""Megasquirt realtime-data logger."""

__version__ = "0.1.0"
