"""LoadCheck - shipment table validation and normalization."""

__version__ = "0.1.0"
