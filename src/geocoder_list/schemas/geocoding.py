"""Pydantic v2 schemas for the canonical geocoding boundary."""

from typing import Any

from pydantic import BaseModel, Field

from geocoder_list.lib.geocoder.attempt_log import AttemptRecord
from geocoder_list.lib.geocoder.base import CanonicalResult


class LocationSchema(BaseModel):
    """A latitude/longitude pair."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GeometrySchema(BaseModel):
    location: LocationSchema


class CanonicalResultResponse(BaseModel):
    """Canonical result as consumed by map-rendering clients.

    ``geocoder`` is omitted for results served from the cache.
    """

    geometry: GeometrySchema
    address: dict[str, Any] = Field(default_factory=dict)
    geocoder: str | None = None

    @classmethod
    def from_result(cls, result: CanonicalResult) -> "CanonicalResultResponse":
        return cls.model_validate(result.to_dict())


class AttemptRecordResponse(BaseModel):
    """One attempt log entry."""

    location: str
    geocoder: str | None = None
    elapsed_seconds: float = Field(..., ge=0)
    error: str | None = None
    result: CanonicalResultResponse | list[CanonicalResultResponse] | None = None

    @classmethod
    def from_record(cls, record: AttemptRecord) -> "AttemptRecordResponse":
        result: CanonicalResultResponse | list[CanonicalResultResponse] | None
        if record.result is None:
            result = None
        elif isinstance(record.result, tuple):
            result = [CanonicalResultResponse.from_result(r) for r in record.result]
        else:
            result = CanonicalResultResponse.from_result(record.result)
        return cls(
            location=record.location,
            geocoder=record.backend_name,
            elapsed_seconds=record.elapsed_seconds,
            error=record.error,
            result=result,
        )


class ResolveResponse(BaseModel):
    """Output of a resolve request: results plus the attempts that produced them."""

    query: str
    results: list[CanonicalResultResponse] = Field(default_factory=list)
    attempts: list[AttemptRecordResponse] = Field(default_factory=list)
