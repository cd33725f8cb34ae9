"""
Configuration Management

Centralized configuration for all SmartCrawl components:
- Browser configuration
- Retry and timeout settings
- Crawl traversal limits
- Learning component storage and model settings
"""

from .crawler import (
    BrowserConfig, RetryConfig, TimeoutConfig,
    CrawlSettings, LearningConfig, CrawlerConfig
)

__all__ = [
    'BrowserConfig', 'RetryConfig', 'TimeoutConfig',
    'CrawlSettings', 'LearningConfig', 'CrawlerConfig'
]
