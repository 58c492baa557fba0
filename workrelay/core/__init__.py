"""Core relay primitives: access gate, adaptive delay, event recording."""
