"""
Core pipeline for Vibe Writer: framing, layout normalization, stage control.
"""
