"""Shared fakes for browser-free tests."""

import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Dict, Iterable, List, Optional

import pytest

from smartcrawl.config import CrawlerConfig, RetryConfig, TimeoutConfig, CrawlSettings
from smartcrawl.errors import SessionInitError
from smartcrawl.exploration.elements.models import ElementDescriptor, ElementKind


class FakePage:
    def __init__(self, url: str = 'about:blank'):
        self.url = url


class FakeBrowserManager:
    """Stands in for BrowserManager: counts session setup/cleanup and hands out pages."""

    def __init__(self, fail_setup: bool = False):
        self.fail_setup = fail_setup
        self.setup_calls = 0
        self.cleanup_calls = 0
        self.pages: List[FakePage] = []

    @asynccontextmanager
    async def session(self):
        if self.fail_setup:
            raise SessionInitError("browser executable not found")
        self.setup_calls += 1
        try:
            yield self
        finally:
            self.cleanup_calls += 1

    async def new_page(self) -> FakePage:
        page = FakePage()
        self.pages.append(page)
        return page


class FakeSite:
    """A link graph served to the crawler through fake navigators."""

    def __init__(self, links: Dict[str, List[str]], failing: Iterable[str] = (),
                 on_navigate: Optional[Callable[[str], None]] = None):
        self.links = links
        self.failing = set(failing)
        self.on_navigate = on_navigate
        self.navigations: List[str] = []

    def navigator_factory(self, page, retry, timeouts):
        return FakeNavigator(self, page)


class FakeNavigator:
    def __init__(self, site: FakeSite, page: FakePage):
        self.site = site
        self.page = page
        self.last_error = None
        self.last_attempts = 0

    async def navigate(self, url: str) -> bool:
        self.site.navigations.append(url)
        if self.site.on_navigate:
            self.site.on_navigate(url)
        await asyncio.sleep(0)
        if url in self.site.failing:
            self.last_attempts = 3
            self.last_error = 'net::ERR_CONNECTION_REFUSED'
            return False
        self.last_attempts = 1
        self.page.url = url
        return True

    async def await_ready(self) -> None:
        await asyncio.sleep(0)

    async def extract_links(self) -> List[str]:
        return list(self.site.links.get(self.page.url, []))


class FakeDiscoverer:
    """Reports one submit button per page, matched by two selector expressions."""

    def __init__(self, broken_urls: Iterable[str] = ()):
        self.broken_urls = set(broken_urls)
        self.pages_seen: List[str] = []

    async def discover(self, page) -> List[ElementDescriptor]:
        self.pages_seen.append(page.url)
        if page.url in self.broken_urls:
            raise RuntimeError("page crashed during discovery")
        attributes = {'id': 'submit', 'role': 'button'}
        return [
            ElementDescriptor('id=submit', ElementKind.BUTTON, attributes, ['click', 'hover', 'doubleClick']),
            ElementDescriptor('id= submit', ElementKind.BUTTON, attributes, ['click', 'hover', 'doubleClick']),
            ElementDescriptor('name=q', ElementKind.INPUT, {'name': 'q'}, ['type', 'fill', 'clear']),
        ]


def make_config(max_depth: int = 3, max_concurrency: int = 1, max_pages=None) -> CrawlerConfig:
    return CrawlerConfig(
        retry=RetryConfig(max_attempts=3, retry_delay=0, jitter=0),
        timeouts=TimeoutConfig(settle_delay=0),
        crawl=CrawlSettings(max_depth=max_depth, max_concurrency=max_concurrency, max_pages=max_pages),
    )


@pytest.fixture
def browser_manager():
    return FakeBrowserManager()


@pytest.fixture
def discoverer():
    return FakeDiscoverer()


@pytest.fixture
def fast_retry():
    return RetryConfig(max_attempts=3, retry_delay=0, jitter=0)


@pytest.fixture
def fast_timeouts():
    return TimeoutConfig(settle_delay=0, selector_timeout=10, network_idle_timeout=10)


@pytest.fixture
def make_site():
    return FakeSite


@pytest.fixture
def crawler_config():
    return make_config


@pytest.fixture
def make_discoverer():
    return FakeDiscoverer


@pytest.fixture
def failing_browser_manager():
    return FakeBrowserManager(fail_setup=True)
