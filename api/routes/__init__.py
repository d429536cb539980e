"""
Routes Module
Modular route handlers for the API
"""

from .ranking import handle_ranking_routes

__all__ = [
    "handle_ranking_routes",
]
