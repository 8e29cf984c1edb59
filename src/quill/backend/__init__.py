"""Rendering backends: source text and Python `ast` trees."""
