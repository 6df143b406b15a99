"""
Topic graph analytics pipeline for the Stack Exchange topic graph project.
"""

from .nodes import create_pipeline


__all__ = ["create_pipeline"]
