"""
Field schemas, format codecs and CSV read-back.

Handles projecting rows onto declared fields and rendering them as CSV or
JSON Lines.
"""
