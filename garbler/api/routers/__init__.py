"""
API Routers Package
Exposes all route modules for the Garbler service
"""

from . import garbler_router

__all__ = [
    "garbler_router",
]
