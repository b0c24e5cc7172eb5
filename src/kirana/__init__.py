"""kirana - inventory, order and customer management for a small retail shop."""

__version__ = "0.1.0"
