"""Pixel and encoding helpers."""
