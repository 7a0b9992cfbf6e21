"""
Middleware and logging configuration.
"""
