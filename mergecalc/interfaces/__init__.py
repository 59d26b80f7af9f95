"""Protocol interfaces for the merger calculator."""
from .price_source import PriceSource
from .supply_source import SupplySource

__all__ = ["PriceSource", "SupplySource"]
