"""
E-Series Preferred-Value Engine

Rounds values to IEC 60063 preferred numbers (E3 to E192), searches
combinations of standard components for an equivalent circuit value, and
designs the resistors of MFB band-pass filter banks.

All math is deterministic and recomputed on every call — no cached state.
"""

from eseries.errors import InvalidInputError
from eseries.series import ESeries, RoundingPolicy, engineering_notation
from eseries.rounding import RoundResult, round_to_series, snap_to_e_series
from eseries.circuit import (
    CircuitResult,
    BatchSearch,
    IterativeSearch,
    equivalent_circuit,
    select_strategy,
    series_window,
)
from eseries.view import SvgRenderer, ToleranceView, render_tolerance_view, tolerance_view
from eseries.mfb import MfbStage, SPECTRUM_BANDS, design_mfb_bandpass

__version__ = "0.1.0"
