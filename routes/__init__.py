# Routes package __init__.py - re-exports routers for main.py convenience
from .practice import router as practice_router
from .rehearsals import router as rehearsals_router

__all__ = ['practice_router', 'rehearsals_router']
