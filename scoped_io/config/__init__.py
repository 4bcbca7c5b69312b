"""
Configuration management and settings.

Loads environment variables (from .env) and provides typed settings objects
for writers, remote uploads and logging.
"""
