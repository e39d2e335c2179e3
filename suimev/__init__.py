"""Building blocks for Sui DEX trading bots: Shio feed and bids, pools, simulation context and utilities."""

__version__ = "0.1.0"