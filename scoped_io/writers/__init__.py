"""
Row writers bound to a transport for the lifetime of one scope.
"""
