"""Utility helpers for DMS."""
