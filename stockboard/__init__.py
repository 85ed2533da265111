"""Inventory and sales dashboard for small shops."""

__version__ = "0.1.0"
