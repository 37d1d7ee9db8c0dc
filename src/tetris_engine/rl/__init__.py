"""Agent drivers for the Tetris-v0 environment."""
