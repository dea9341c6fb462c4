"""Report listing models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reportcal.models._base import ReportCalBaseModel
from reportcal.models.calendar import DayKey

_KIND_BY_EXTENSION: dict[str, str] = {
    ".pdf": "PDF",
    ".xlsx": "XLSX",
    ".docx": "DOCX",
}


class ReportItem(ReportCalBaseModel):
    """A single stored report file as described by ``/list-reports``."""

    name: str = ""
    path: str = ""
    last_modified: str | None = None
    size: int | None = None

    @field_validator("size", mode="before")
    @classmethod
    def _coerce_size(cls, value: object) -> object:
        # Some listings send the size as a numeric string.
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return value

    @property
    def kind(self) -> str:
        """File type guessed from the extension (``PDF``, ``XLSX``, ``DOCX`` or ``OTHER``)."""
        lowered = self.name.lower()
        for extension, kind in _KIND_BY_EXTENSION.items():
            if lowered.endswith(extension):
                return kind
        return "OTHER"

    @property
    def day(self) -> DayKey | None:
        """Day encoded in the storage path, if any."""
        return DayKey.from_path(self.path or self.name)


class ListingKind(StrEnum):
    COUNTS = "counts"
    ITEMS = "items"


class ReportListing(BaseModel):
    """Normalized ``/list-reports`` response.

    The endpoint answers either with a raw list of items or with an
    object carrying ``details`` and, optionally, precomputed per-day
    ``counts``. Both shapes are folded into this one tagged model.
    """

    model_config = ConfigDict(frozen=True)

    kind: ListingKind
    prefix: str
    counts: dict[str, int] = Field(default_factory=dict)
    items: list[ReportItem] = Field(default_factory=list)
