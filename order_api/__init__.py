"""Customers, orders and order items over HTTP, behind JWT bearer authentication."""

__version__ = "1.0.0"
