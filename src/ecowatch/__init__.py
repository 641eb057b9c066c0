"""EcoWatch environmental signal aggregator."""

__version__ = "0.3.0"
