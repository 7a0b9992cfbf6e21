"""
todoboard - task and group management service.
"""
__version__ = "0.1.0"
