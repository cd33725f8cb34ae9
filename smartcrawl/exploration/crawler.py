"""
Crawl Orchestration

Breadth-first traversal of a website that builds a per-URL inventory of
interactive elements.

Traversal runs over an explicit work queue of ``(url, remaining_depth)``
pairs served by a fixed number of workers. Each worker owns one page handle,
so page operations are never issued concurrently against the same page. The
visited set and the inventory live in ``CrawlState`` behind a single lock;
marking a URL visited is an atomic check-and-insert and happens before the
URL is navigated.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from ..config import CrawlerConfig
from ..core.browser.manager import BrowserManager
from ..core.browser.navigation import NavigationController
from ..utils.error_handler import ErrorHandler, ErrorRecord, NAVIGATION_ERROR
from ..utils.navigation_utils import NavigationUtils, normalize_url
from .elements.extraction import ElementDiscoverer
from .elements.models import ElementDescriptor
from .elements.selectors import deduplicate

logger = logging.getLogger(__name__)


class PageState(str, Enum):
    """Per-URL progress through one crawl step."""

    IDLE = "idle"
    NAVIGATING = "navigating"
    DISCOVERING = "discovering"
    TRAVERSING = "traversing"


class CrawlState:
    """Visited URLs and inventory of one crawl invocation.

    ``visited`` only grows. Mutation of ``visited`` and ``inventory`` goes
    through the async methods, which hold ``lock`` for the whole
    check-then-update sequence. ``page_states`` lists the states each claimed
    URL passed through, in order.
    """

    def __init__(self, max_pages: Optional[int] = None):
        self.max_pages = max_pages
        self.visited: Set[str] = set()
        self.visit_order: List[str] = []
        self.inventory: Dict[str, List[ElementDescriptor]] = {}
        self.page_states: Dict[str, List[PageState]] = {}
        self.lock = asyncio.Lock()

    async def claim(self, url: str) -> bool:
        """Mark *url* visited. False if it already was, or the page cap is reached."""
        async with self.lock:
            if url in self.visited:
                return False
            if self.max_pages is not None and len(self.visited) >= self.max_pages:
                return False
            self.visited.add(url)
            self.visit_order.append(url)
            return True

    async def store(self, url: str, elements: List[ElementDescriptor]) -> None:
        async with self.lock:
            self.inventory[url] = elements

    def is_visited(self, url: str) -> bool:
        return url in self.visited

    def transition(self, url: str, state: PageState) -> None:
        self.page_states.setdefault(url, []).append(state)


@dataclass
class CrawlResult:
    """Outcome of one crawl invocation."""
    start_url: str
    inventory: Dict[str, List[ElementDescriptor]]
    visited: List[str]
    errors: List[ErrorRecord] = field(default_factory=list)
    cancelled: bool = False
    duration: float = 0.0
    page_states: Dict[str, List[PageState]] = field(default_factory=dict)

    @property
    def failed_urls(self) -> List[str]:
        """URLs that could not be navigated to."""
        return [e.url for e in self.errors if e.error_type == NAVIGATION_ERROR]

    def to_dict(self) -> Dict:
        return {
            'start_url': self.start_url,
            'duration': round(self.duration, 2),
            'cancelled': self.cancelled,
            'visited': list(self.visited),
            'inventory': {
                url: [element.to_dict(encode_json=True) for element in elements]
                for url, elements in self.inventory.items()
            },
            'errors': [error.to_dict() for error in self.errors],
        }


class CrawlOrchestrator:
    """
    Top-level crawl entry point.

    Navigation and discovery failures are isolated to the URL they occur on
    and recorded in the result; only failure to acquire the browsing session
    propagates (as ``SessionInitError``).
    """

    def __init__(self, config: Optional[CrawlerConfig] = None,
                 browser_manager: Optional[BrowserManager] = None,
                 discoverer: Optional[ElementDiscoverer] = None,
                 navigator_factory: Optional[Callable[..., NavigationController]] = None):
        self.config = config or CrawlerConfig()
        self.browser_manager = browser_manager or BrowserManager(self.config.browser)
        self.error_handler = ErrorHandler()
        self.discoverer = discoverer or ElementDiscoverer(
            self.config.retry, self.config.timeouts, self.error_handler
        )
        self.navigator_factory = navigator_factory or NavigationController

        self.state: Optional[CrawlState] = None
        self._cancel_event: Optional[asyncio.Event] = None
        self._cancel_requested = False

    def cancel(self) -> None:
        """
        Stop starting new navigations; in-flight pages finish normally.

        Cancellation is permanent for this orchestrator: a crawl started after
        ``cancel()`` visits nothing.
        """
        self._cancel_requested = True
        if self._cancel_event is not None:
            self._cancel_event.set()

    async def crawl(self, start_url: str, max_depth: Optional[int] = None,
                    cancel_event: Optional[asyncio.Event] = None) -> CrawlResult:
        """
        Crawl from *start_url* up to *max_depth* levels.

        Args:
            start_url: First URL to visit
            max_depth: Number of levels to visit; 0 visits nothing. Defaults
                to the configured depth.
            cancel_event: Optional external cancellation signal

        Returns:
            CrawlResult with the (possibly partial) inventory

        Raises:
            SessionInitError: If the browsing session cannot be acquired
        """
        depth = self.config.crawl.max_depth if max_depth is None else max_depth
        start_url = normalize_url(start_url)
        self.state = CrawlState(self.config.crawl.max_pages)
        self.error_handler = ErrorHandler()
        if isinstance(self.discoverer, ElementDiscoverer):
            self.discoverer.error_handler = self.error_handler
        self._cancel_event = cancel_event or asyncio.Event()
        if self._cancel_requested:
            self._cancel_event.set()
        link_filter = NavigationUtils(start_url)
        start_time = time.time()

        logger.info(f"🚀 Starting crawl of {start_url} (depth {depth})")

        if depth > 0 and not self._cancel_event.is_set():
            async with self.browser_manager.session():
                worker_count = max(1, self.config.crawl.max_concurrency)
                pages = [await self.browser_manager.new_page() for _ in range(worker_count)]

                queue: asyncio.Queue = asyncio.Queue()
                queue.put_nowait((start_url, depth))

                workers = [
                    asyncio.create_task(self._worker(i, page, queue, link_filter))
                    for i, page in enumerate(pages)
                ]
                try:
                    await queue.join()
                finally:
                    for worker in workers:
                        worker.cancel()
                    await asyncio.gather(*workers, return_exceptions=True)

        duration = time.time() - start_time
        cancelled = self._cancel_event.is_set()
        logger.info(
            f"🏁 Crawl finished in {duration:.1f}s: {len(self.state.visited)} URLs visited, "
            f"{len(self.state.inventory)} inventoried, {len(self.error_handler.records)} errors"
            + (" (cancelled)" if cancelled else "")
        )
        if self.error_handler.records:
            logger.info(f"Error summary: {self.error_handler.get_error_summary()}")

        return CrawlResult(
            start_url=start_url,
            inventory=dict(self.state.inventory),
            visited=list(self.state.visit_order),
            errors=list(self.error_handler.records),
            cancelled=cancelled,
            duration=duration,
            page_states={url: list(states) for url, states in self.state.page_states.items()}
        )

    async def _worker(self, worker_id: int, page, queue: asyncio.Queue,
                      link_filter: NavigationUtils) -> None:
        """Pull URLs from the queue and crawl them until cancelled."""
        navigator = self.navigator_factory(page, self.config.retry, self.config.timeouts)
        while True:
            url, depth = await queue.get()
            try:
                if self._cancel_event.is_set():
                    logger.debug(f"Worker {worker_id} skipping {url}: crawl cancelled")
                    continue
                await self._crawl_page(navigator, page, url, depth, queue, link_filter)
            except Exception as e:
                self.error_handler.handle_crawl_error(url, e)
            finally:
                queue.task_done()

    async def _crawl_page(self, navigator: NavigationController, page, url: str, depth: int,
                          queue: asyncio.Queue, link_filter: NavigationUtils) -> None:
        """Visit one URL: navigate, discover, then schedule its links."""
        if depth <= 0 or not await self.state.claim(url):
            return

        try:
            await self._visit(navigator, page, url, depth, queue, link_filter)
        finally:
            self.state.transition(url, PageState.IDLE)

    async def _visit(self, navigator: NavigationController, page, url: str, depth: int,
                     queue: asyncio.Queue, link_filter: NavigationUtils) -> None:
        self.state.transition(url, PageState.NAVIGATING)
        if not await navigator.navigate(url):
            self.error_handler.handle_navigation_error(
                url, navigator.last_error or 'navigation failed', navigator.last_attempts
            )
            return

        self.state.transition(url, PageState.DISCOVERING)
        await navigator.await_ready()
        elements = deduplicate(await self.discoverer.discover(page))
        await self.state.store(url, elements)

        self.state.transition(url, PageState.TRAVERSING)
        remaining = depth - 1
        if remaining <= 0:
            return

        links = link_filter.filter_links(
            await navigator.extract_links(),
            same_domain_only=self.config.crawl.same_domain_only
        )
        scheduled = 0
        for link in links:
            if not self.state.is_visited(link):
                queue.put_nowait((link, remaining))
                scheduled += 1

        logger.info(f"🔗 {url}: {len(elements)} elements, {scheduled} links scheduled")
