"""Presentation adapters."""
from .json_response_renderer import JSONResponseRenderer

__all__ = [
    'JSONResponseRenderer',
]
