"""Headless baking pipeline: content, formatting, exports and site builder."""
