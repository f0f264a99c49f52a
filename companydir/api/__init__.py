"""
Request layer for the company directory.

A Flask app that decodes JSON requests into store calls and encodes the
results back, and the threaded server that runs it.
"""

from .handlers import CompanyHandlers, Response, InvalidRequest
from .app import create_app
from .server import CompanyServer

__all__ = ['CompanyHandlers', 'Response', 'InvalidRequest',
           'create_app', 'CompanyServer']
