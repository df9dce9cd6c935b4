"""Provision KDS and captain staff accounts for a restaurant tenant."""

__version__ = "0.1.0"
