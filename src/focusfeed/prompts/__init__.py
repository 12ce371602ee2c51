"""Prompt templates for snippet generation."""

from .snippet_prompt import build_snippet_prompt

__all__ = ["build_snippet_prompt"]
