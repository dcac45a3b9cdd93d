"""Blockchain access for the connector."""

from aggregator.chain.provider import ChainProvider, Web3ChainProvider, extract_revert_data

__all__ = ["ChainProvider", "Web3ChainProvider", "extract_revert_data"]
