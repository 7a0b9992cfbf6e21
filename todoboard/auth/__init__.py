"""
Authentication: credential store and FastAPI dependencies.
"""
from .credentials import CredentialStore

__all__ = ["CredentialStore"]
