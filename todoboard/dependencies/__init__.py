"""
Dependency injection helpers.
"""
