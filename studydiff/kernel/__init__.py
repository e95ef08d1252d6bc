"""Kernel utilities shared across the diff engine.

Rules:
- Kernel code must not import from `studydiff.diff`.
- Kernel utilities should stay small and stable; avoid comparison logic here.
"""
