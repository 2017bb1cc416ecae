"""Adaptive training-program generation and adaptation engine."""
