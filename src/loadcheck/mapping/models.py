"""Data models for header-to-field mapping."""

from typing import Optional, Sequence

from pydantic import BaseModel, Field

from ..models import Issue, IssueCode, Severity, humanize_field

FieldMapping = dict[str, str]

BLANK_HEADER_LABEL = "(blank column)"


class SplitColumns(BaseModel):
    """Date and optional time columns backing one datetime field."""

    date: str
    time: Optional[str] = None

    @property
    def synthetic_key(self) -> str:
        """Key recorded in the field mapping for visibility."""
        return f"{self.date} + {self.time}" if self.time else self.date


SplitMapping = dict[str, SplitColumns]


class Ambiguity(BaseModel):
    """A field for which several headers matched equally well."""

    field: str
    candidates: list[str]


class HeaderMappingResult(BaseModel):
    """Outcome of mapping a header row to shipment fields."""

    mapping: FieldMapping = Field(default_factory=dict)
    split: SplitMapping = Field(default_factory=dict)
    ambiguities: list[Ambiguity] = Field(default_factory=list)
    unmapped_headers: list[str] = Field(default_factory=list)

    def mapped_fields(self) -> set[str]:
        return set(self.mapping.values()) | set(self.split)

    def with_mapping(
        self,
        headers: Sequence[str],
        mapping: FieldMapping,
        split: SplitMapping,
    ) -> "HeaderMappingResult":
        """Copy with an adjusted mapping; unmapped headers are recomputed."""
        used = set(mapping)
        for columns in split.values():
            used.add(columns.date)
            if columns.time:
                used.add(columns.time)

        unmapped = [
            h if h.strip() else BLANK_HEADER_LABEL
            for h in headers
            if not h.strip() or h not in used
        ]
        return self.model_copy(
            update={"mapping": dict(mapping), "split": dict(split), "unmapped_headers": unmapped}
        )

    def issues(self) -> list[Issue]:
        """Warnings for ambiguous matches and headers outside the schema."""
        issues = [
            Issue(
                code=IssueCode.HEADER_AMBIGUITY,
                severity=Severity.WARN,
                message=(
                    f"Multiple columns could match '{amb.field}': {', '.join(amb.candidates)}"
                ),
                column=amb.field,
                suggestion=(
                    f"Using '{self._holder_of(amb.field)}' for now. "
                    "Use header overrides to specify exact mapping if needed."
                ),
            )
            for amb in self.ambiguities
        ]

        if self.unmapped_headers:
            count = len(self.unmapped_headers)
            sample = ", ".join(self.unmapped_headers[:3])
            more = "..." if count > 3 else ""
            issues.append(
                Issue(
                    code=IssueCode.NON_SCHEMA_FIELD,
                    severity=Severity.WARN,
                    message=f"Found {count} non-schema columns: {sample}{more}",
                    suggestion="These columns will be ignored during analysis.",
                )
            )

        return issues

    def _holder_of(self, field: str) -> str:
        for header, mapped in self.mapping.items():
            if mapped == field:
                return header
        return humanize_field(field)
