"""Adapters backing the ports with files, terminals and network clients."""
