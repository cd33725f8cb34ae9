"""
Element Discovery

Enumerates interactive elements on a loaded page. Supports both live
Playwright pages and static HTML snapshots; both use the same kind tables
and produce the same selectors for the same DOM.
"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError

from ...config import RetryConfig, TimeoutConfig
from ...utils.error_handler import ErrorHandler
from .models import ElementDescriptor, ElementKind, detect_possible_interactions
from .selectors import synthesize_selector

logger = logging.getLogger(__name__)


# Selector expressions queried for each kind, in order.
KIND_SELECTORS: Dict[ElementKind, Tuple[str, ...]] = {
    ElementKind.BUTTON: (
        'button',
        'input[type="button"]',
        'input[type="submit"]',
        'input[type="reset"]',
        '[role="button"]',
    ),
    ElementKind.INPUT: (
        'input:not([type])',
        'input[type="text"]',
        'input[type="email"]',
        'input[type="password"]',
        'input[type="search"]',
        'input[type="tel"]',
        'input[type="url"]',
        'input[type="number"]',
        '[role="textbox"]:not(textarea)',
    ),
    ElementKind.LINK: (
        'a[href]',
        '[role="link"]',
    ),
    ElementKind.SELECT: (
        'select',
        '[role="listbox"]',
    ),
    ElementKind.TEXTAREA: (
        'textarea',
        '[contenteditable="true"]',
    ),
}

MAX_TEXT_LENGTH = 100

# Attributes, trimmed text and positional path of one element.
_DESCRIBE_ELEMENT_JS = """
el => {
    const attributes = {};
    for (const attr of el.attributes) {
        attributes[attr.name] = attr.value;
    }
    const segments = [];
    for (let node = el; node && node.nodeType === Node.ELEMENT_NODE; node = node.parentElement) {
        let index = 1;
        for (let sib = node.previousElementSibling; sib; sib = sib.previousElementSibling) {
            if (sib.tagName === node.tagName) index++;
        }
        segments.unshift(`${node.tagName.toLowerCase()}[${index}]`);
    }
    return {
        attributes,
        text: (el.textContent || '').trim(),
        path: '/' + segments.join('/'),
    };
}
"""


def structural_path(element: Tag) -> str:
    """Positional path of a parsed element, in the same form the live page reports."""
    segments = []
    node = element
    while isinstance(node, Tag) and node.name != '[document]':
        index = 1 + len(node.find_previous_siblings(node.name))
        segments.append(f"{node.name}[{index}]")
        node = node.parent
    return '/' + '/'.join(reversed(segments))


def _trim_text(text: str) -> str:
    return ' '.join(text.split())[:MAX_TEXT_LENGTH]


def _attribute_values(attrs: Dict[str, Any]) -> Dict[str, str]:
    """Flatten BeautifulSoup attribute values (class lists etc.) to strings."""
    return {
        name: ' '.join(value) if isinstance(value, list) else str(value)
        for name, value in attrs.items()
    }


class ElementDiscoverer:
    """
    Discovers interactive elements using per-kind selector expressions.

    A selector expression that never matches, or whose query fails, is
    skipped; discovery always continues with the remaining expressions and
    kinds.
    """

    def __init__(self, retry: Optional[RetryConfig] = None,
                 timeouts: Optional[TimeoutConfig] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.retry = retry or RetryConfig()
        self.timeouts = timeouts or TimeoutConfig()
        self.error_handler = error_handler
        self.kind_selectors = KIND_SELECTORS

    async def discover(self, page) -> List[ElementDescriptor]:
        """
        Enumerate interactive elements on a live Playwright page.

        Args:
            page: Loaded Playwright page

        Returns:
            Element descriptors in discovery order (not yet de-duplicated)
        """
        elements: List[ElementDescriptor] = []

        for kind, expressions in self.kind_selectors.items():
            for expression in expressions:
                if not await self._wait_for_expression(page, expression):
                    logger.debug(f"No matches for {expression!r} on {page.url}")
                    continue
                try:
                    handles = await page.query_selector_all(expression)
                except PlaywrightError as e:
                    self._report(page, expression, str(e))
                    continue

                for handle in handles:
                    try:
                        info = await handle.evaluate(_DESCRIBE_ELEMENT_JS)
                    except PlaywrightError as e:
                        # Node detached between query and evaluation
                        logger.debug(f"Skipping element for {expression!r}: {e}")
                        continue
                    elements.append(self._describe(kind, info['attributes'], info['text'], info['path']))

        self._log_element_summary(elements, page.url)
        return elements

    def discover_html(self, html_content: str) -> List[ElementDescriptor]:
        """
        Enumerate interactive elements in a static HTML snapshot.

        Args:
            html_content: Raw HTML content

        Returns:
            Element descriptors in discovery order (not yet de-duplicated)
        """
        soup = BeautifulSoup(html_content, 'html.parser')
        elements: List[ElementDescriptor] = []

        for kind, expressions in self.kind_selectors.items():
            for expression in expressions:
                for node in soup.select(expression):
                    elements.append(self._describe(
                        kind,
                        _attribute_values(node.attrs),
                        node.get_text(),
                        structural_path(node)
                    ))

        self._log_element_summary(elements, 'HTML snapshot')
        return elements

    async def _wait_for_expression(self, page, expression: str) -> bool:
        """Wait, with bounded retries, for at least one match of *expression*."""
        attempts = max(1, self.retry.selector_attempts)
        for attempt in range(1, attempts + 1):
            try:
                await page.wait_for_selector(
                    expression, state='attached', timeout=self.timeouts.selector_timeout
                )
                return True
            except PlaywrightError:
                if attempt == attempts:
                    return False
                await asyncio.sleep(self.retry.retry_delay + random.uniform(0, self.retry.jitter))
        return False

    def _describe(self, kind: ElementKind, attributes: Dict[str, str],
                  text: str, path: str) -> ElementDescriptor:
        return ElementDescriptor(
            selector=synthesize_selector(attributes, path),
            kind=kind,
            attributes=dict(attributes),
            interactions=list(detect_possible_interactions(kind)),
            text=_trim_text(text or '')
        )

    def _report(self, page, expression: str, message: str) -> None:
        if self.error_handler is not None:
            self.error_handler.handle_discovery_error(page.url, expression, message)
        else:
            logger.debug(f"Discovery error for {expression!r}: {message}")

    def _log_element_summary(self, elements: List[ElementDescriptor], source: str) -> None:
        """Log summary of discovered elements."""
        summary: Dict[str, int] = {}
        for element in elements:
            summary[element.kind.value] = summary.get(element.kind.value, 0) + 1

        summary_parts = [f"{count} {kind}s" for kind, count in summary.items()]
        logger.info(f"📋 Discovered {len(elements)} elements on {source}: {', '.join(summary_parts) or 'none'}")
