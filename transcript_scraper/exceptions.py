"""
Exception types shared across the scraper.
"""


class ScraperError(Exception):
    """Base class for scraper failures."""


class DiscoveryError(ScraperError):
    """Channel videos could not be enumerated."""


class StrategyError(ScraperError):
    """A single transcript strategy failed; the pipeline moves on."""

    def __init__(self, strategy: str, reason: str):
        super().__init__(f"{strategy}: {reason}")
        self.strategy = strategy
        self.reason = reason


class AffordanceNotFound(StrategyError):
    """A UI element did not appear within its bounded wait."""


class PersistenceError(ScraperError):
    """An artifact could not be written."""


class ShutdownRequested(BaseException):
    """
    Raised from the signal handler to unwind the in-flight job.

    Derives from BaseException; ``except Exception`` blocks in the
    strategies do not catch it.
    """
