"""Header-to-field mapping for shipment tables."""

from .models import (
    Ambiguity,
    FieldMapping,
    HeaderMappingResult,
    SplitColumns,
    SplitMapping,
)
from .synonyms import KNOWN_SYNONYMS, SynonymTable, build_synonym_table
from .mapper import HeaderMapper

__all__ = [
    "Ambiguity",
    "FieldMapping",
    "HeaderMappingResult",
    "SplitColumns",
    "SplitMapping",
    "KNOWN_SYNONYMS",
    "SynonymTable",
    "build_synonym_table",
    "HeaderMapper",
]
