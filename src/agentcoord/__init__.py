"""Multi-agent delegation core: classify, route, decompose, order and assign work."""

__version__ = "0.1.0"
