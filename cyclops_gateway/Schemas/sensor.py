# cyclops_gateway/Schemas/sensor.py

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Union

from cyclops_gateway.Services.gateway_core.normalizers import coerce_number


class SensorRecord(BaseModel):
    """
    One entry of the JSON array returned by GET /latest/ on the gateway.
    Numeric fields arrive as strings and are coerced here. A missing or
    non-finite value rejects the record; unreadable optional numbers
    (rssi, time, age) become None. id, title and station are kept as the
    gateway sent them.
    """
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str] = Field(..., description="Gateway sensor identifier")
    title: str = Field(..., description="Free-text sensor title set on the gateway")
    station: Optional[Union[int, str]] = Field(None, description="Receiving station number")
    units: Optional[str] = Field(None, description="Free-text unit label (kg, tonne, lbf, ...)")
    value: float = Field(..., description="Raw reading in `units`")
    rssi: Optional[int] = Field(None, description="Received signal strength (dBm)")
    time: Optional[float] = Field(None, description="Sensor clock (seconds)")
    age: Optional[float] = Field(None, description="Seconds since the last reading")

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v):
        n = coerce_number(v)
        if isinstance(n, float) and not math.isfinite(n):
            raise ValueError(f"value must be a finite number, got {v!r}")
        return n

    @field_validator("time", "age", mode="before")
    @classmethod
    def _coerce_optional_float(cls, v):
        # Unreadable optional numbers become None
        n = coerce_number(v)
        if isinstance(n, bool) or not isinstance(n, (int, float)):
            return None
        if isinstance(n, float) and not math.isfinite(n):
            return None
        return n

    @field_validator("rssi", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        # Truncates like parseInt("-60.7") on the gateway side
        n = coerce_number(v)
        if isinstance(n, bool) or not isinstance(n, (int, float)):
            return None
        if isinstance(n, float):
            if not math.isfinite(n):
                return None
            return int(n)
        return n

    @field_validator("units", mode="before")
    @classmethod
    def _strip_units(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v
