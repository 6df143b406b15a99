"""
Data layer pipeline for the Stack Exchange topic graph project.
"""

from .pipeline import create_pipeline


__all__ = ["create_pipeline"]
