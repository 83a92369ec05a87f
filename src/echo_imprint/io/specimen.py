"""
Specimen records.

A specimen is the frozen snapshot of a finished session (final smoothed
features plus growth) with an identity and optional file references.
This module owns the dict/JSON shape only; keeping a library of
specimens is up to the caller.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

SCHEMA_VERSION = "1.0"

_REQUIRED_FIELDS = ("id", "created_at", "amplitude", "frequency", "rhythm", "growth")


def _number(data: dict[str, Any], key: str) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Specimen field '{key}' must be a number, got {value!r}")
    return float(value)


def _parse_timestamp(value: Any) -> datetime:
    """ISO 8601 timestamp; a trailing 'Z' is read as UTC."""
    if not isinstance(value, str):
        raise ValueError(f"Specimen field 'created_at' must be a string, got {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class Specimen:
    """A stored sound memory."""

    amplitude: float
    frequency: float
    rhythm: float
    growth: float
    name: str = "Sound Memory"
    preset: str = "default"  # engine preset the session ran with
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    audio_file: str | None = None
    image_file: str | None = None

    @classmethod
    def from_snapshot(cls, snapshot, **kwargs: Any) -> "Specimen":
        """Build from a FrozenSnapshot (or anything with the four values)."""
        return cls(
            amplitude=float(snapshot.amplitude),
            frequency=float(snapshot.frequency),
            rhythm=float(snapshot.rhythm),
            growth=float(snapshot.growth),
            **kwargs,
        )

    @property
    def time_label(self) -> str:
        return self.created_at.strftime("%Y-%m-%d %H:%M")

    def to_dict(self, precision: int = 6) -> dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "id": self.id,
            "name": self.name,
            "preset": self.preset,
            "created_at": self.created_at.isoformat(),
            "amplitude": round(self.amplitude, precision),
            "frequency": round(self.frequency, precision),
            "rhythm": round(self.rhythm, precision),
            "growth": round(self.growth, precision),
            "audio_file": self.audio_file,
            "image_file": self.image_file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Specimen":
        if not isinstance(data, dict):
            raise ValueError(f"Specimen must be a JSON object, got {type(data).__name__}")
        missing = [key for key in _REQUIRED_FIELDS if key not in data]
        if missing:
            raise ValueError(f"Specimen is missing fields: {', '.join(missing)}")

        return cls(
            id=str(data["id"]),
            name=data.get("name") or "Sound Memory",
            preset=data.get("preset") or "default",
            created_at=_parse_timestamp(data["created_at"]),
            amplitude=_number(data, "amplitude"),
            frequency=_number(data, "frequency"),
            rhythm=_number(data, "rhythm"),
            growth=_number(data, "growth"),
            audio_file=data.get("audio_file"),
            image_file=data.get("image_file"),
        )

    def export_json(self, output_path: Union[str, Path], indent: int = 2) -> Path:
        """Write this specimen as a JSON document."""
        output_path = Path(output_path)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=indent)
        return output_path

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "Specimen":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
