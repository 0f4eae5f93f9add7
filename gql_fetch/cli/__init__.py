"""
Command-line interface for gql_fetch.
"""

from .main import main

__all__ = ["main"]
