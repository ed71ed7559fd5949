"""Packet forwarding simulation with per-router congestion control."""

__version__ = "0.1.0"
