"""Falling-block puzzle engine with gymnasium and pygame front ends."""
