"""Version information for fast_filter."""

__version__ = '0.3.0'
__author__ = 'Fast Filter Developers'
__email__ = 'fast-filter@users.noreply.github.com'
__description__ = 'Single-field record filter stage for data pipelines'
