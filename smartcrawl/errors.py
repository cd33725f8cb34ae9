"""Exception hierarchy for SmartCrawl."""


class SmartCrawlError(Exception):
    """Base class for all SmartCrawl errors."""


class SessionInitError(SmartCrawlError):
    """The browsing session could not be acquired. Fatal to a crawl."""


class NavigationError(SmartCrawlError):
    """A single navigation attempt failed."""


class TrainingError(SmartCrawlError):
    """The action model could not be trained."""
