"""
Utils package for crawling.

Error tracking and URL handling shared by the crawler components.
"""

from .error_handler import ErrorHandler, ErrorRecord
from .navigation_utils import NavigationUtils, normalize_url, is_valid_navigation_url

__all__ = [
    'ErrorHandler', 'ErrorRecord',
    'NavigationUtils', 'normalize_url', 'is_valid_navigation_url'
]
