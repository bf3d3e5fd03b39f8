"""
Resilience components for the channel transcript scraper.
"""

from .frontier import Frontier
from .rate_limiter import RateLimiter
from .content_discovery import ChannelDiscovery
from .shutdown import ShutdownCoordinator

__all__ = [
    'Frontier',
    'RateLimiter',
    'ChannelDiscovery',
    'ShutdownCoordinator'
]
