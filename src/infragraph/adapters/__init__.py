"""Adapters binding the domain ports to providers and storage."""
