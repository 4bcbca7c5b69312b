"""
Scope protocol and error types.

Defines the acquire/release contract, the Scope context manager that enforces
release on every exit path, and the exception hierarchy.
"""
