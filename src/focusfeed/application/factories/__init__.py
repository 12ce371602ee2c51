"""Application factories package."""

from .component_factory import ComponentFactory

__all__ = ["ComponentFactory"]
