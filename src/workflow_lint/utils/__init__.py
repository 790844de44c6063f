"""Shared output helpers."""
