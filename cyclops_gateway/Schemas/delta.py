# cyclops_gateway/Schemas/delta.py

from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Any, Dict, List


def utc_timestamp(now: datetime | None = None) -> str:
    """UTC ISO 8601 with 'Z' suffix, e.g. 2026-10-19T10:30:00.123456Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


class PathValue(BaseModel):
    path: str = Field(..., min_length=1)
    value: Any = None


class PathMetaValue(BaseModel):
    units: str
    description: str


class PathMeta(BaseModel):
    path: str = Field(..., min_length=1)
    value: PathMetaValue


class UpdateBatch(BaseModel):
    """
    One ingestion event: ordered (path, value) pairs sharing a timestamp and
    source label, plus metadata for measurement paths. Built fresh per event.
    """
    source_label: str
    timestamp: str = Field(default_factory=utc_timestamp)
    values: List[PathValue] = Field(default_factory=list)
    meta: List[PathMeta] = Field(default_factory=list)

    def add_value(self, path: str, value: Any):
        self.values.append(PathValue(path=path, value=value))

    def add_meta(self, path: str, units: str, description: str):
        self.meta.append(PathMeta(path=path, value=PathMetaValue(units=units, description=description)))

    @property
    def paths(self) -> List[str]:
        return [v.path for v in self.values]

    def to_delta(self, context: str) -> Dict[str, Any]:
        """
        Serialize as a SignalK-style delta. `meta` is only present when the
        batch declares metadata.
        """
        update: Dict[str, Any] = {
            "source": {"label": self.source_label},
            "timestamp": self.timestamp,
            "values": [v.model_dump() for v in self.values],
        }
        if self.meta:
            update["meta"] = [m.model_dump() for m in self.meta]

        return {"context": context, "updates": [update]}
