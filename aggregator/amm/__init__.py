"""Pool math for the two supported protocol families."""

from aggregator.amm.constant_product import AmmPool, get_amount_in, get_amount_out

__all__ = ["AmmPool", "get_amount_in", "get_amount_out"]
