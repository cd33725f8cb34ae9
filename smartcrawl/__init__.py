"""
SmartCrawl: Element Inventory Crawling with Outcome-Driven Action Policies

Crawls a website with Playwright, inventories the interactive elements of
every reachable page and learns from the outcomes of generated tests which
actions to attempt next.

Key Components:
- Config: Browser, retry, timeout, crawl and learning settings
- Core: Browser session lifecycle and resilient navigation
- Exploration: Crawl orchestration, element discovery, selector synthesis
- Learning: Outcome history, defect patterns and the action policy
"""

from .config import CrawlerConfig, BrowserConfig, RetryConfig, TimeoutConfig, CrawlSettings, LearningConfig
from .core import BrowserManager, NavigationController
from .errors import SmartCrawlError, SessionInitError
from .exploration import CrawlOrchestrator, CrawlResult, ElementDescriptor, ElementKind, ElementDiscoverer
from .learning import ActionPolicy, LearningEngine, OutcomeRecord, DefectPattern, OutcomeStore, DefectPatternAggregator

__version__ = "1.0.0"

__all__ = [
    # Configuration
    'CrawlerConfig', 'BrowserConfig', 'RetryConfig', 'TimeoutConfig', 'CrawlSettings', 'LearningConfig',

    # Core
    'BrowserManager', 'NavigationController',

    # Errors
    'SmartCrawlError', 'SessionInitError',

    # Exploration
    'CrawlOrchestrator', 'CrawlResult', 'ElementDescriptor', 'ElementKind', 'ElementDiscoverer',

    # Learning
    'ActionPolicy', 'LearningEngine', 'OutcomeRecord', 'DefectPattern', 'OutcomeStore', 'DefectPatternAggregator'
]
