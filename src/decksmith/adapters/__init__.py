"""Adapters wrapping external processes and network services."""
