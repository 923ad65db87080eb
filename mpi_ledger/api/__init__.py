"""
HTTP layer of the invocation gateway.
"""
