"""
Multiple-feedback (MFB) band-pass filter bank design.

Each band of a spectrum analyzer is an inverting MFB band-pass stage with
one capacitor value C used twice, input resistor R1, feedback resistor R2
and shunt resistor R3. For centre frequency fm, mid-band gain G (< 0) and
quality factor Q:

    R2 = Q / (π·fm·C)
    R1 = R2 / (-2G)
    R3 = -G·R1 / (2Q² + G)
    bandwidth = 1 / (π·R2·C)

After the resistors are snapped to an E-series, the realized centre
frequency Q / (π·R2·C) and gain R2 / (-2·R1) are reported next to the
targets.
"""

from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np

from eseries.errors import InvalidInputError
from eseries.rounding import round_to_series
from eseries.series import ESeries

# Seven-band analyzer: centre frequencies in a 1:2.5 ratio and the
# capacitor chosen for each band.
SPECTRUM_BANDS = {
    'center_frequencies': [63.0, 160.0, 400.0, 1000.0, 2500.0, 6250.0, 16000.0],
    'capacitance': [33e-9, 33e-9, 6.8e-9, 2.2e-9, 2.2e-9, 0.33e-9, 0.33e-9],
    'gain': -10.0,
    'q': 6.0,
}


@dataclass
class MfbStage:
    """One designed band: ideal resistors, snapped resistors, and what they realize."""
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

    @property
    def fm_error_pct(self) -> float:
        return round((self.fm_snapped - self.fm) / self.fm * 100, 4)


def design_mfb_bandpass(
    fm: Sequence[float],
    capacitance: Sequence[float],
    gain: float = -10.0,
    q: float = 6.0,
    series: Union[str, ESeries] = 'E24',
) -> List[MfbStage]:
    """
    Compute and snap the resistor values of an MFB band-pass bank.

    Args:
        fm: Centre frequency of every band (Hz).
        capacitance: Capacitor value of every band (F), same length as fm.
        gain: Mid-band gain, negative (inverting stage).
        q: Quality factor, shared by all bands.
        series: E-series for the resistors.

    Returns:
        One MfbStage per band, in input order.
    """
    fm_arr = np.atleast_1d(np.asarray(fm, dtype=float))
    c_arr = np.atleast_1d(np.asarray(capacitance, dtype=float))
    if fm_arr.shape != c_arr.shape or fm_arr.ndim != 1:
        raise InvalidInputError("fm and capacitance must be 1-D and the same length")
    if not (np.all(np.isfinite(fm_arr)) and np.all(fm_arr > 0)):
        raise InvalidInputError("Centre frequencies must be positive and finite")
    if not (np.all(np.isfinite(c_arr)) and np.all(c_arr > 0)):
        raise InvalidInputError("Capacitances must be positive and finite")
    if not gain < 0:
        raise InvalidInputError(f"Gain must be negative for an inverting MFB stage, got {gain}")
    if not q > 0:
        raise InvalidInputError(f"Q must be positive, got {q}")
    if 2 * q ** 2 + gain <= 0:
        raise InvalidInputError(f"No positive R3 exists for Q={q} and gain={gain}: need 2Q² > -gain")

    r2 = q / (np.pi * fm_arr * c_arr)
    r1 = r2 / (-2 * gain)
    r3 = -gain * r1 / (2 * q ** 2 + gain)
    bandwidth = 1.0 / (np.pi * r2 * c_arr)

    r1_e = round_to_series(r1, series).values
    r2_e = round_to_series(r2, series).values
    r3_e = round_to_series(r3, series).values
    fm_e = q / (r2_e * np.pi * c_arr)
    gain_e = r2_e / (-2 * r1_e)

    return [
        MfbStage(
            fm=float(fm_arr[i]),
            capacitance=float(c_arr[i]),
            r1=float(r1[i]),
            r2=float(r2[i]),
            r3=float(r3[i]),
            bandwidth=float(bandwidth[i]),
            r1_snapped=float(r1_e[i]),
            r2_snapped=float(r2_e[i]),
            r3_snapped=float(r3_e[i]),
            fm_snapped=float(fm_e[i]),
            gain_snapped=float(gain_e[i]),
        )
        for i in range(len(fm_arr))
    ]
