"""Pygame rendering and keyboard play."""
