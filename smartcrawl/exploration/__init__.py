"""
Exploration Package

Crawl traversal and element discovery:
- Breadth-first crawl orchestration with shared visited/inventory state
- Element discovery across selector classes
- Selector synthesis, canonicalization and de-duplication
"""

from .crawler import CrawlOrchestrator, CrawlResult, CrawlState, PageState
from .elements import ElementDescriptor, ElementKind, ElementDiscoverer

__all__ = [
    'CrawlOrchestrator', 'CrawlResult', 'CrawlState', 'PageState',
    'ElementDescriptor', 'ElementKind', 'ElementDiscoverer'
]
