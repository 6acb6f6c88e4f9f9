"""
fast_filter: a single-field record filter stage for data pipelines
"""

from ._version import __version__, __author__, __email__, __description__

# Make sure the filter processor is registered on import
from fast_filter.processors import register_standard_processors
register_standard_processors()


__all__ = [
    '__version__',
    '__author__',
    '__email__',
    '__description__',
]
