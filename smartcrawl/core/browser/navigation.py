"""
Navigation Control

Retrying navigation, readiness waiting and link extraction for a single
page handle.
"""

import asyncio
import logging
import random
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError

from ...config import RetryConfig, TimeoutConfig
from ...errors import NavigationError

logger = logging.getLogger(__name__)


# Resolves once every image that is still loading has loaded or errored.
# Each image also resolves on its own timer so one stuck image cannot hold
# the page.
_WAIT_FOR_IMAGES_JS = """
timeoutMs => {
    const pending = Array.from(document.images).filter(img => !img.complete);
    return Promise.all(pending.map(img => new Promise(resolve => {
        img.addEventListener('load', resolve, { once: true });
        img.addEventListener('error', resolve, { once: true });
        setTimeout(resolve, timeoutMs);
    }))).then(() => pending.length);
}
"""

_EXTRACT_LINKS_JS = "anchors => anchors.map(a => a.href)"


class NavigationController:
    """
    Drives one page: bounded-retry navigation, readiness waits, link extraction.

    Worst-case latency of ``navigate`` is
    ``max_attempts * (navigation_timeout + retry_delay + jitter)``.
    """

    def __init__(self, page, retry: Optional[RetryConfig] = None,
                 timeouts: Optional[TimeoutConfig] = None):
        self.page = page
        self.retry = retry or RetryConfig()
        self.timeouts = timeouts or TimeoutConfig()

        self.last_error: Optional[str] = None
        self.last_attempts = 0

    async def navigate(self, url: str) -> bool:
        """
        Navigate to URL, retrying failed attempts.

        A timeout, a Playwright navigation error or an HTTP 5xx response counts
        as a failed attempt. An HTTP 4xx response fails immediately.

        Args:
            url: URL to navigate to

        Returns:
            True if navigation succeeded, False once all attempts are exhausted
        """
        self.last_error = None
        self.last_attempts = 0
        max_attempts = max(1, self.retry.max_attempts)

        for attempt in range(1, max_attempts + 1):
            self.last_attempts = attempt
            try:
                logger.info(f"🧭 Navigating to: {url} (attempt {attempt}/{max_attempts})")
                response = await self.page.goto(
                    url,
                    timeout=self.timeouts.navigation_timeout,
                    wait_until='domcontentloaded'
                )

                status = response.status if response is not None else None
                if status is not None and status >= 500:
                    raise NavigationError(f"HTTP {status}")
                if status is not None and status >= 400:
                    self.last_error = f"HTTP {status}"
                    logger.warning(f"Navigation returned {status}: {url}")
                    return False

                return True

            except (PlaywrightError, NavigationError, asyncio.TimeoutError) as e:
                self.last_error = str(e) or type(e).__name__
                logger.warning(f"Navigation attempt {attempt}/{max_attempts} failed for {url}: {self.last_error}")
                if attempt < max_attempts:
                    await asyncio.sleep(self._retry_delay())

        return False

    async def await_ready(self) -> None:
        """
        Wait until the page has settled.

        Blocks for network quiescence, DOM parsing, a fixed settle delay and
        all pending images. Each wait is bounded; a wait that times out is
        logged and the page is used as it is.
        """
        try:
            await self.page.wait_for_load_state('networkidle', timeout=self.timeouts.network_idle_timeout)
        except PlaywrightError as e:
            # Long-polling pages never go idle
            logger.debug(f"Network idle wait failed: {e}")

        try:
            await self.page.wait_for_load_state('domcontentloaded', timeout=self.timeouts.navigation_timeout)
        except PlaywrightError as e:
            logger.debug(f"DOM content wait failed: {e}")

        await asyncio.sleep(self.timeouts.settle_delay)

        try:
            pending = await asyncio.wait_for(
                self.page.evaluate(_WAIT_FOR_IMAGES_JS, self.timeouts.image_timeout),
                timeout=self.timeouts.ready_timeout / 1000
            )
            if pending:
                logger.debug(f"Waited for {pending} image(s)")
        except asyncio.TimeoutError:
            logger.debug("Image wait exceeded the ready timeout")
        except PlaywrightError as e:
            logger.debug(f"Image wait failed: {e}")

    async def extract_links(self) -> List[str]:
        """Read all outbound link targets on the current page as absolute URLs."""
        try:
            return await self.page.eval_on_selector_all('a[href]', _EXTRACT_LINKS_JS)
        except PlaywrightError as e:
            logger.warning(f"Link extraction failed on {self.page.url}: {e}")
            return []

    def _retry_delay(self) -> float:
        return self.retry.retry_delay + random.uniform(0, max(0.0, self.retry.jitter))
