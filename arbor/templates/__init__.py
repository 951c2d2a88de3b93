"""
Arbor Templates - Renderer collaborator.
"""

from .renderer import Renderer

__all__ = ["Renderer"]
