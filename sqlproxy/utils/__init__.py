"""Utility helpers for SQLProxy."""
