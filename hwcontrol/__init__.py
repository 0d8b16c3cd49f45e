"""Loaned command interfaces, controller lifecycle, joint limit handles and transmissions."""

__version__ = "0.1.0"