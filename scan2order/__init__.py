"""Scan-to-order counter service: cart, order queue and staff board."""

__version__ = "1.0.0"
