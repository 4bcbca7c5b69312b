"""
Backends (local file, remote object, memory buffer) that open and close the
transport a writer writes to.
"""
