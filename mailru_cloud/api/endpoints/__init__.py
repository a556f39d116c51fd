"""Typed API endpoint functions."""
