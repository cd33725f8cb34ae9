"""
Browser Management

Handles browser setup, cleanup and page allocation for Playwright-based
crawling. One browser context is shared by every page handle of a crawl.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from playwright.async_api import async_playwright, Page, Browser, BrowserContext

from ...config import BrowserConfig
from ...errors import SessionInitError

logger = logging.getLogger(__name__)


class BrowserManager:
    """
    Manages the browser lifecycle for one crawl.

    ``session()`` acquires the browser once and guarantees release, even
    when the crawl fails. Pages are handed out with ``new_page()``; each page
    must only be driven by one task at a time.
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()

        # Browser instances
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.pages: List[Page] = []

        # State tracking
        self.is_setup = False

    async def setup(self) -> None:
        """
        Launch the browser and create the shared context.

        Raises:
            SessionInitError: If any part of the session cannot be acquired.
                Partially acquired resources are released first.
        """
        if self.is_setup:
            logger.warning("Browser already setup")
            return

        try:
            logger.info("🚀 Setting up browser...")

            self.playwright = await async_playwright().start()

            self.browser = await self.playwright.chromium.launch(
                headless=self.config.headless,
                args=self.config.args
            )

            self.context = await self.browser.new_context(
                viewport={
                    'width': self.config.viewport_width,
                    'height': self.config.viewport_height
                },
                user_agent=self.config.user_agent
            )

            self.is_setup = True
            logger.info("✅ Browser setup completed")

        except Exception as e:
            logger.error(f"Browser setup failed: {e}")
            await self.cleanup()
            raise SessionInitError(f"Could not start browser session: {e}") from e

    async def new_page(self) -> Page:
        """Open a new page in the shared context."""
        if not self.is_ready():
            raise SessionInitError("Browser not setup - call setup() first")

        try:
            page = await self.context.new_page()
        except Exception as e:
            raise SessionInitError(f"Could not open page: {e}") from e

        self.pages.append(page)
        return page

    async def cleanup(self) -> None:
        """Clean up browser resources."""
        logger.info("🧹 Cleaning up browser...")

        for page in self.pages:
            try:
                await page.close()
            except Exception as e:
                logger.debug(f"Error closing page: {e}")
        self.pages = []

        for name in ('context', 'browser'):
            resource = getattr(self, name)
            if resource is not None:
                try:
                    await resource.close()
                except Exception as e:
                    logger.warning(f"Error closing {name}: {e}")
                setattr(self, name, None)

        if self.playwright:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self.playwright = None

        self.is_setup = False
        logger.info("✅ Browser cleanup completed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator['BrowserManager']:
        """Scope a browsing session: setup on entry, cleanup on exit."""
        await self.setup()
        try:
            yield self
        finally:
            await self.cleanup()

    def is_ready(self) -> bool:
        """Check if browser is ready for use."""
        return self.is_setup and self.context is not None
