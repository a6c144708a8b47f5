"""Tenant context resolution and row scoping for the retail management system."""

__version__ = "0.1.0"
