"""Utilities for statistics, plotting and logging."""
