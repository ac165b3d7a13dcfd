"""Utilities used across the generation core."""
