"""
Mealsync household meal-planning package.

The package exposes the grocery consolidation engine, persistence helpers for
households, meals and recipes, and the HTTP surface shared by household members.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
