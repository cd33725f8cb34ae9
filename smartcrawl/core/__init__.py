"""
Core SmartCrawl Components

This package contains the browser-level building blocks for crawling:
- Browser session lifecycle and page pool
- Retrying navigation and readiness waiting
"""

from .browser.manager import BrowserManager
from .browser.navigation import NavigationController

__all__ = ['BrowserManager', 'NavigationController']
