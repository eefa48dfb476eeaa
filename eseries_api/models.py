"""Pydantic models for E-series API requests and responses."""

from __future__ import annotations

import math
import os
from typing import Optional

import numpy as np
from pydantic import BaseModel, Field

DEFAULT_SERIES = os.getenv("ESERIES_DEFAULT_SERIES", "E24")


def to_json_list(values) -> list:
    """Flatten an array to a JSON-safe list, NaN → None."""
    return [None if math.isnan(v) else v for v in np.asarray(values, dtype=float).ravel().tolist()]


def from_json_list(values: list[Optional[float]]) -> np.ndarray:
    """Inverse of to_json_list: None → NaN."""
    return np.array([np.nan if v is None else v for v in values], dtype=float)


# --- Series ---

class SeriesInfo(BaseModel):
    name: str
    values_per_decade: int
    base_values: list[float]


class SeriesListResponse(BaseModel):
    series: list[SeriesInfo]


# --- Rounding ---

class RoundRequest(BaseModel):
    """Values to round. null entries are treated as undefined."""
    values: list[Optional[float]] = Field(..., max_length=100000)
    series: str = DEFAULT_SERIES
    policy: str = Field("harmonic", description="harmonic, arithmetic, up, down, or a prefix")


class RoundResponse(BaseModel):
    values: list[Optional[float]]
    index: list[Optional[int]]
    pns: list[float]
    edges: list[float]
    policy: str


# --- Equivalent circuit ---

class CircuitRequest(BaseModel):
    targets: list[Optional[float]] = Field(..., max_length=1000)
    series: str = DEFAULT_SERIES
    bounds: list[float] = Field(..., description="[min, max] permitted component values")
    count: int = Field(..., description="Number of components in the circuit")
    reciprocal: bool = Field(..., description="Sum reciprocals (parallel R/L, series C)")


class CircuitMatch(BaseModel):
    target: Optional[float]
    equivalent: Optional[float]
    components: list[Optional[float]]
    index: list[Optional[int]]
    display: str = ""


class CircuitResponse(BaseModel):
    matches: list[CircuitMatch]
    pns: list[float]
    reciprocal: bool
    strategy: str


# --- Tolerance view ---

class ViewRequest(BaseModel):
    values: list[Optional[float]] = Field(..., min_length=1, max_length=1000)
    series: str = DEFAULT_SERIES
    policy: str = "harmonic"
    unit: str = Field("", max_length=8)


# --- MFB band-pass bank ---

class MfbRequest(BaseModel):
    center_frequencies: list[float] = Field(..., min_length=1, max_length=64, description="Hz")
    capacitance: list[float] = Field(..., min_length=1, max_length=64, description="Farads, one per band")
    gain: float = Field(-10.0, description="Mid-band gain (negative, inverting)")
    q: float = Field(6.0, gt=0)
    series: str = DEFAULT_SERIES


class MfbStageResponse(BaseModel):
    fm: float
    capacitance: float
    r1: float
    r2: float
    r3: float
    bandwidth: float
    r1_snapped: float
    r2_snapped: float
    r3_snapped: float
    fm_snapped: float
    gain_snapped: float
    fm_error_pct: float
    description: str = ""


class MfbResponse(BaseModel):
    stages: list[MfbStageResponse]
    series: str
