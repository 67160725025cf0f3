"""Header mapping: resolve free-text column headers to shipment fields.

Matching runs in four phases with fixed precedence:

1. Overrides supplied by the caller
2. Exact (case-insensitive) synonym matches
3. Split date/time column detection for the datetime fields
4. Fuzzy (substring) matches, recording ambiguities

Each phase is a pure function of an immutable ``CandidatePool`` and returns
the headers and fields it claimed; the next phase sees a pool with those
removed. Headers are identified by their text, so repeated header texts are
claimed together and resolve to their first column during extraction.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..models import DATETIME_FIELDS
from .models import (
    BLANK_HEADER_LABEL,
    Ambiguity,
    FieldMapping,
    HeaderMappingResult,
    SplitColumns,
    SplitMapping,
)
from .synonyms import (
    KNOWN_SYNONYMS,
    SPLIT_DATE_FRAGMENTS,
    SPLIT_TIME_FRAGMENTS,
    SynonymTable,
)

logger = logging.getLogger(__name__)


def _norm(text: str) -> str:
    return text.strip().lower()


def _contains_either(header: str, phrase: str) -> bool:
    """Substring containment in either direction, case-insensitive."""
    h = _norm(header)
    p = phrase.lower()
    return p in h or h in p


@dataclass(frozen=True)
class CandidatePool:
    """Headers and fields still available to a matching phase."""

    headers: tuple[str, ...]
    claimed_headers: frozenset[str] = frozenset()
    claimed_fields: frozenset[str] = frozenset()

    def open_headers(self) -> list[str]:
        """Unclaimed, non-blank header texts in column order."""
        return [h for h in self.headers if h.strip() and h not in self.claimed_headers]

    def claim(self, result: "PhaseResult") -> "CandidatePool":
        return CandidatePool(
            headers=self.headers,
            claimed_headers=self.claimed_headers | result.claimed_headers,
            claimed_fields=self.claimed_fields | result.claimed_fields,
        )


@dataclass(frozen=True)
class PhaseResult:
    """Assignments made by one matching phase."""

    mapping: FieldMapping = field(default_factory=dict)
    split: SplitMapping = field(default_factory=dict)
    ambiguities: tuple[Ambiguity, ...] = ()
    claimed_headers: frozenset[str] = frozenset()
    claimed_fields: frozenset[str] = frozenset()


def _unique_in_order(headers: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for header in headers:
        seen.setdefault(header, None)
    return tuple(seen)


def match_overrides(pool: CandidatePool, overrides: Mapping[str, str]) -> PhaseResult:
    """Phase 1: caller overrides win over any synonym lookup."""
    mapping: FieldMapping = {}
    fields: set[str] = set()

    for header in pool.open_headers():
        if header not in overrides:
            continue
        target = overrides[header]
        if target in fields:
            logger.warning(
                f"Override for '{header}' ignored: field '{target}' already claimed by an override"
            )
            continue
        mapping[header] = target
        fields.add(target)

    return PhaseResult(
        mapping=mapping,
        claimed_headers=frozenset(mapping),
        claimed_fields=frozenset(fields),
    )


def find_split_pairs(pool: CandidatePool) -> frozenset[str]:
    """
    Datetime fields whose date and time live in two distinct open columns.

    Only headers that contain a fragment count here, so short headers such
    as "PU" do not pass for a date column.
    """
    paired = set()
    open_headers = pool.open_headers()

    for dt_field in DATETIME_FIELDS:
        if dt_field in pool.claimed_fields:
            continue
        date_header = next(
            (h for h in open_headers if any(f in _norm(h) for f in SPLIT_DATE_FRAGMENTS[dt_field])),
            None,
        )
        if date_header is None:
            continue
        has_time = any(
            h != date_header and any(f in _norm(h) for f in SPLIT_TIME_FRAGMENTS[dt_field])
            for h in open_headers
        )
        if has_time:
            paired.add(dt_field)

    return frozenset(paired)


def match_exact(
    pool: CandidatePool,
    synonyms: SynonymTable,
    deferred_fields: frozenset[str] = frozenset(),
) -> PhaseResult:
    """Phase 2: first open header equal to any synonym phrase claims the field."""
    mapping: FieldMapping = {}
    taken: set[str] = set()

    for target, phrases in synonyms.items():
        if target in pool.claimed_fields or target in deferred_fields:
            continue
        phrase_set = {p.lower() for p in phrases}
        for header in pool.open_headers():
            if header in taken:
                continue
            if _norm(header) in phrase_set:
                mapping[header] = target
                taken.add(header)
                break

    return PhaseResult(
        mapping=mapping,
        claimed_headers=frozenset(taken),
        claimed_fields=frozenset(mapping.values()),
    )


def match_split(pool: CandidatePool) -> PhaseResult:
    """Phase 3: pair date and time columns for unclaimed datetime fields."""
    mapping: FieldMapping = {}
    split: SplitMapping = {}
    taken: set[str] = set()

    for dt_field in DATETIME_FIELDS:
        if dt_field in pool.claimed_fields:
            continue
        available = [h for h in pool.open_headers() if h not in taken]

        date_header = next(
            (
                h
                for h in available
                if any(_contains_either(h, f) for f in SPLIT_DATE_FRAGMENTS[dt_field])
            ),
            None,
        )
        if date_header is None:
            continue

        time_header = next(
            (
                h
                for h in available
                if h != date_header
                and any(_contains_either(h, f) for f in SPLIT_TIME_FRAGMENTS[dt_field])
            ),
            None,
        )

        columns = SplitColumns(date=date_header, time=time_header)
        split[dt_field] = columns
        mapping[columns.synthetic_key] = dt_field
        taken.add(date_header)
        if time_header:
            taken.add(time_header)

    return PhaseResult(
        mapping=mapping,
        split=split,
        claimed_headers=frozenset(taken),
        claimed_fields=frozenset(split),
    )


def match_fuzzy(pool: CandidatePool, synonyms: SynonymTable) -> PhaseResult:
    """Phase 4: substring matches; several candidates become an ambiguity."""
    mapping: FieldMapping = {}
    ambiguities: list[Ambiguity] = []
    taken: set[str] = set()
    order = {h: i for i, h in enumerate(pool.headers)}

    for target, phrases in synonyms.items():
        if target in pool.claimed_fields:
            continue
        candidates = [
            h
            for h in pool.open_headers()
            if h not in taken and any(_contains_either(h, p) for p in phrases)
        ]
        if not candidates:
            continue

        if len(candidates) > 1:
            ambiguities.append(Ambiguity(field=target, candidates=candidates))
            chosen = min(candidates, key=lambda h: (len(h), order[h]))
            logger.debug(f"Ambiguous header for '{target}', provisionally using '{chosen}'")
        else:
            chosen = candidates[0]

        mapping[chosen] = target
        taken.add(chosen)

    return PhaseResult(
        mapping=mapping,
        ambiguities=tuple(ambiguities),
        claimed_headers=frozenset(taken),
        claimed_fields=frozenset(mapping.values()),
    )


class HeaderMapper:
    """Maps a header row to shipment fields using a synonym table."""

    def __init__(self, synonyms: Optional[SynonymTable] = None):
        self.synonyms = synonyms if synonyms is not None else KNOWN_SYNONYMS

    def map_headers(
        self,
        headers: list[str],
        overrides: Optional[Mapping[str, str]] = None,
    ) -> HeaderMappingResult:
        """
        Resolve headers to fields.

        Never raises; ambiguities and unclaimed headers are reported on the
        result for later stages to turn into diagnostics.
        """
        pool = CandidatePool(headers=_unique_in_order(headers))
        results: list[PhaseResult] = []

        overrides_result = match_overrides(pool, overrides or {})
        results.append(overrides_result)
        pool = pool.claim(overrides_result)

        exact_result = match_exact(pool, self.synonyms, deferred_fields=find_split_pairs(pool))
        results.append(exact_result)
        pool = pool.claim(exact_result)

        split_result = match_split(pool)
        results.append(split_result)
        pool = pool.claim(split_result)

        fuzzy_result = match_fuzzy(pool, self.synonyms)
        results.append(fuzzy_result)
        pool = pool.claim(fuzzy_result)

        mapping: FieldMapping = {}
        split: SplitMapping = {}
        ambiguities: list[Ambiguity] = []
        for result in results:
            mapping.update(result.mapping)
            split.update(result.split)
            ambiguities.extend(result.ambiguities)

        unmapped = [
            h if h.strip() else BLANK_HEADER_LABEL
            for h in pool.headers
            if h not in pool.claimed_headers
        ]

        logger.debug(
            f"Mapped {len(mapping)} headers, {len(split)} split fields, "
            f"{len(ambiguities)} ambiguities, {len(unmapped)} unmapped"
        )

        return HeaderMappingResult(
            mapping=mapping,
            split=split,
            ambiguities=ambiguities,
            unmapped_headers=unmapped,
        )
