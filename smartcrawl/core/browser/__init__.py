"""
Browser Management Module

Handles browser lifecycle, page allocation and page navigation.
"""

from .manager import BrowserManager
from .navigation import NavigationController

__all__ = ['BrowserManager', 'NavigationController']
