"""Packaged run defaults."""
