"""
Model pricing data and cost computation.
"""

from .table import PricingEntry, PricingTable, load_pricing_table

__all__ = ["PricingEntry", "PricingTable", "load_pricing_table"]
