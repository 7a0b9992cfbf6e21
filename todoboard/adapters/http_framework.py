"""
Adapter for HTTP framework (FastAPI).
Isolates FastAPI-specific imports to make library replacement easier.
"""
from fastapi import APIRouter, Query, Path, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette.exceptions import HTTPException as StarletteHTTPException


class HTTPFrameworkAdapter:
    """Adapter for HTTP framework operations."""

    def __init__(self):
        self.APIRouter = APIRouter
        self.Query = Query
        self.Path = Path
        self.Request = Request
        self.Depends = Depends
        self.RequestValidationError = RequestValidationError
        self.StarletteHTTPException = StarletteHTTPException
        self.JSONResponse = JSONResponse
        self.Response = Response
        self.HTTPBasic = HTTPBasic
        self.HTTPBasicCredentials = HTTPBasicCredentials

    def create_router(self, *args, **kwargs) -> APIRouter:
        """Create an APIRouter instance."""
        return self.APIRouter(*args, **kwargs)
