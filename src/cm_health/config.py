from __future__ import annotations
import math
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError


@dataclass(frozen=True)
class Thresholds:
    """Named numeric boundaries used by the threshold classifiers."""

    cpu_percent: float = 80.0
    memory_percent: float = 85.0
    disk_free_percent: float = 15.0
    collection_eval_seconds: float = 300.0
    client_active_percent: float = 90.0
    sup_sync_age_hours: float = 24.0

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self.names()}

    def with_overrides(self, overrides: Mapping[str, object]) -> "Thresholds":
        """Return a copy with the given thresholds replaced.

        Unknown names and non-numeric or non-finite values raise :class:`ConfigError`.
        """
        known = set(self.names())
        values: Dict[str, float] = {}
        for name, raw in overrides.items():
            if name not in known:
                raise ConfigError(f"unknown threshold {name!r} (expected one of: {', '.join(sorted(known))})")
            if isinstance(raw, bool):
                raise ConfigError(f"threshold {name!r} must be numeric, got {raw!r}")
            try:
                value = float(raw)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                raise ConfigError(f"threshold {name!r} must be numeric, got {raw!r}")
            if not math.isfinite(value):
                raise ConfigError(f"threshold {name!r} must be a finite number, got {raw!r}")
            values[name] = value
        return replace(self, **values)


class _ThresholdsFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cpu_percent: Optional[float] = Field(default=None, allow_inf_nan=False)
    memory_percent: Optional[float] = Field(default=None, allow_inf_nan=False)
    disk_free_percent: Optional[float] = Field(default=None, allow_inf_nan=False)
    collection_eval_seconds: Optional[float] = Field(default=None, allow_inf_nan=False)
    client_active_percent: Optional[float] = Field(default=None, allow_inf_nan=False)
    sup_sync_age_hours: Optional[float] = Field(default=None, allow_inf_nan=False)


def load_thresholds_file(path: Path) -> Dict[str, float]:
    """Read threshold overrides from a JSON object file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read thresholds file {path}: {e}")
    try:
        parsed = _ThresholdsFile.model_validate_json(text)
    except ValidationError as ve:
        raise ConfigError(f"invalid thresholds file {path}: {ve.errors()}")
    return parsed.model_dump(exclude_none=True)


def parse_threshold_options(items: list[str]) -> Dict[str, str]:
    """Parse repeated ``name=value`` options into a mapping."""
    out: Dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise ConfigError(f"threshold override must look like name=value, got {item!r}")
        out[name.strip()] = value.strip()
    return out


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one report run."""

    provider: str
    site_code: str
    output_path: Path = Path("cm-health-report.html")
    timeout_s: float = 30.0
    verify_tls: bool = True
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    thresholds: Thresholds = field(default_factory=Thresholds)

    @property
    def target(self) -> str:
        """Identifier printed in the report header."""
        return f"{self.site_code} @ {self.provider}"

    @property
    def base_url(self) -> str:
        p = self.provider.rstrip("/")
        if "://" not in p:
            p = f"https://{p}"
        return f"{p}/AdminService/wmi"
