"""Ports implemented by adapters."""
