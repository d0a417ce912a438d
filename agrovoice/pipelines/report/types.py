"""Typed containers for the report generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from agrovoice.pipelines.errors import ValidationError

REQUIRED_FIELDS = ("parcelle", "weather", "soil", "elevation")


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class ReportRequest:
    """Field conditions submitted for one report.

    The four payloads are opaque; only a handful of well-known keys are read
    to label the prompt and the resulting report.
    """

    parcelle: Any
    weather: Any
    soil: Any
    elevation: Any

    @classmethod
    def from_payload(cls, payload: Any) -> "ReportRequest":
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object.")
        missing = [name for name in REQUIRED_FIELDS if _is_missing(payload.get(name))]
        if missing:
            raise ValidationError(
                "Missing data to generate the report: " + ", ".join(missing)
            )
        return cls(**{name: payload[name] for name in REQUIRED_FIELDS})

    @property
    def parcelle_id(self) -> str:
        if isinstance(self.parcelle, Mapping):
            value = self.parcelle.get("id") or self.parcelle.get("name")
            return str(value) if value is not None else "unknown"
        return str(self.parcelle)

    @property
    def parcelle_name(self) -> str:
        if isinstance(self.parcelle, Mapping):
            value = self.parcelle.get("name") or self.parcelle.get("id")
            return str(value) if value is not None else "unknown"
        return str(self.parcelle)

    @property
    def weather_snapshot(self) -> dict[str, Any]:
        """Current conditions, from ``weather.current`` when the payload nests them."""
        if not isinstance(self.weather, Mapping):
            return {"value": self.weather}
        current = self.weather.get("current")
        if isinstance(current, Mapping):
            return dict(current)
        return dict(self.weather)


__all__ = ["ReportRequest", "REQUIRED_FIELDS"]
