"""Shipment table analysis pipeline."""

from .models import AnalysisOptions, AnalysisRequest, AnalysisResponse, MappingMeta, RunMeta
from .limits import bound_request
from .analyzer import ShipmentAnalyzer

__all__ = [
    "AnalysisOptions",
    "AnalysisRequest",
    "AnalysisResponse",
    "MappingMeta",
    "RunMeta",
    "bound_request",
    "ShipmentAnalyzer",
]
