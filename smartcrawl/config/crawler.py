"""
Crawler Configuration

Configuration classes for browser sessions, navigation retries, timeouts,
crawl traversal and the learning component.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Tuple, Callable, Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class BrowserConfig:
    """Configuration for browser setup."""
    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    user_agent: str = 'Mozilla/5.0 (compatible; SmartCrawl/1.0; Element Inventory Bot)'
    args: List[str] = None

    def __post_init__(self):
        if self.args is None:
            self.args = ['--no-sandbox', '--disable-dev-shm-usage']


@dataclass
class RetryConfig:
    """Retry behaviour for navigation and selector waits."""
    max_attempts: int = 3
    retry_delay: float = 1.0  # seconds between attempts
    jitter: float = 0.25  # random extra delay, seconds
    selector_attempts: int = 1


@dataclass
class TimeoutConfig:
    """Configuration for various timeouts."""
    navigation_timeout: int = 30000  # milliseconds
    network_idle_timeout: int = 10000
    selector_timeout: int = 1000
    image_timeout: int = 5000
    ready_timeout: int = 20000
    settle_delay: float = 0.5  # seconds


@dataclass
class CrawlSettings:
    """Traversal limits for one crawl invocation."""
    max_depth: int = 3
    max_concurrency: int = 3
    same_domain_only: bool = True
    max_pages: Optional[int] = None


@dataclass
class LearningConfig:
    """Locations and hyper-parameters for the learning component."""
    data_dir: str = '.smartcrawl'
    outcomes_file: str = 'outcomes.jsonl'
    patterns_file: str = 'models/defect-patterns.json'
    model_file: str = 'models/action-policy.joblib'
    threshold: float = 0.5
    hidden_layers: Tuple[int, ...] = (32, 16)
    learning_rate: float = 0.001
    max_iter: int = 200
    random_state: Optional[int] = 42

    @property
    def outcomes_path(self) -> Path:
        return Path(self.data_dir) / self.outcomes_file

    @property
    def patterns_path(self) -> Path:
        return Path(self.data_dir) / self.patterns_file

    @property
    def model_path(self) -> Path:
        return Path(self.data_dir) / self.model_file


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise ValueError(f"not a boolean: {value!r}")


# (environment variable, section attribute, field, parser)
_ENV_OVERRIDES: List[Tuple[str, str, str, Callable[[str], Any]]] = [
    ('SMARTCRAWL_HEADLESS', 'browser', 'headless', _parse_bool),
    ('SMARTCRAWL_MAX_DEPTH', 'crawl', 'max_depth', int),
    ('SMARTCRAWL_MAX_CONCURRENCY', 'crawl', 'max_concurrency', int),
    ('SMARTCRAWL_MAX_RETRIES', 'retry', 'max_attempts', int),
    ('SMARTCRAWL_RETRY_DELAY', 'retry', 'retry_delay', float),
    ('SMARTCRAWL_NAVIGATION_TIMEOUT', 'timeouts', 'navigation_timeout', int),
    ('SMARTCRAWL_DATA_DIR', 'learning', 'data_dir', str),
]


@dataclass
class CrawlerConfig:
    """Main configuration for crawling and learning."""
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    crawl: CrawlSettings = field(default_factory=CrawlSettings)
    learning: LearningConfig = field(default_factory=LearningConfig)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> 'CrawlerConfig':
        """
        Build a configuration from defaults plus SMARTCRAWL_* environment variables.

        A .env file is loaded first; variables already present in the
        environment take precedence over it.
        """
        load_dotenv(dotenv_path)
        config = cls()

        for env_name, section, attr, parser in _ENV_OVERRIDES:
            raw = os.getenv(env_name)
            if raw is None or raw == '':
                continue
            try:
                setattr(getattr(config, section), attr, parser(raw))
            except ValueError as e:
                logger.warning(f"Ignoring invalid {env_name}={raw!r}: {e}")

        return config
