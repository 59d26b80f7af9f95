"""Service modules"""
from .feed import FeedState, TickerFeed
from .loader import DataLoader
from .view import AllocationView

__all__ = ["AllocationView", "DataLoader", "FeedState", "TickerFeed"]
