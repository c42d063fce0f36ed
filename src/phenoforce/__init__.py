"""Climate forcing disaggregation and phenology accounting."""

__version__ = "0.1.0"
