"""
Navigation Utilities

Provides URL handling, domain checking, and normalization utilities
for website crawling.
"""

import logging
from urllib.parse import urlparse, urljoin, urlunparse
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """
    Normalize URL so that equivalent spellings of one page compare equal.

    Strips surrounding whitespace and the fragment, lower-cases the scheme and
    host, and uses ``/`` as the path of a bare host.
    """
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    path = parsed.path or ('/' if parsed.netloc else '')
    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        path,
        parsed.params,
        parsed.query,
        ''  # Remove fragment
    ))


def is_valid_navigation_url(url: Optional[str]) -> bool:
    """Check if URL is valid for navigation."""
    if not url:
        return False

    # Skip javascript:, mailto: and tel: links
    if url.strip().lower().startswith(('javascript:', 'mailto:', 'tel:', 'data:')):
        return False

    # Skip anchors
    if url.startswith('#'):
        return False

    return True


class NavigationUtils:
    """
    Utilities for URL handling during website crawling.

    Provides domain checking, URL resolution, and link filtering.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.base_domain = urlparse(base_url).netloc.lower()

    def is_same_domain(self, url: str) -> bool:
        """Check if URL belongs to the same domain as base URL."""
        try:
            parsed_url = urlparse(url)
            netloc = parsed_url.netloc.lower()
            return netloc == self.base_domain or netloc == ''
        except ValueError as e:
            logger.debug(f"Error parsing URL {url}: {e}")
            return False

    def resolve_url(self, url: str) -> str:
        """Resolve relative URL to absolute URL."""
        return urljoin(self.base_url, url)

    def filter_links(self, links: Iterable[str], same_domain_only: bool = True) -> List[str]:
        """
        Resolve, normalize and de-duplicate links, keeping first-seen order.

        Args:
            links: Raw link targets (absolute or relative)
            same_domain_only: Drop links that leave the base domain

        Returns:
            Ordered list of distinct normalized absolute URLs
        """
        seen = set()
        result = []
        for link in links:
            if not is_valid_navigation_url(link):
                continue
            absolute = normalize_url(self.resolve_url(link))
            if same_domain_only and not self.is_same_domain(absolute):
                continue
            if absolute not in seen:
                seen.add(absolute)
                result.append(absolute)
        return result
