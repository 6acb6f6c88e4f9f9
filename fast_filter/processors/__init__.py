"""Step processors provided by fast_filter."""

from fast_filter.core.base_processor import registry
from fast_filter.processors.fast_filter_processor import FastFilterProcessor


def register_standard_processors():
    """Register the built-in processors with the global registry."""
    registry.register('fast_filter', FastFilterProcessor)


__all__ = [
    'FastFilterProcessor',
    'register_standard_processors',
]
