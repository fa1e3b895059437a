"""Fetch named project templates into a target directory."""

__version__ = "0.3.0"

__all__ = ["__version__"]
