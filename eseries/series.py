"""
IEC 60063 E-series tables, option parsing, and engineering notation.

Base values are stored as three significant digits (100 to 988) so that
decade scaling can be done exactly: 470 / 100 is the nearest double to 4.7,
whereas 4.7 * 100 is not 470.
"""

from enum import Enum
from typing import Tuple, Union

import numpy as np

from eseries.errors import InvalidInputError


E3_DIGITS = (100, 220, 470)

E6_DIGITS = (100, 150, 220, 330, 470, 680)

E12_DIGITS = (100, 120, 150, 180, 220, 270, 330, 390, 470, 560, 680, 820)

E24_DIGITS = (
    100, 110, 120, 130, 150, 160, 180, 200, 220, 240, 270, 300,
    330, 360, 390, 430, 470, 510, 560, 620, 680, 750, 820, 910,
)

E48_DIGITS = (
    100, 105, 110, 115, 121, 127, 133, 140, 147, 154, 162, 169,
    178, 187, 196, 205, 215, 226, 237, 249, 261, 274, 287, 301,
    316, 332, 348, 365, 383, 402, 422, 442, 464, 487, 511, 536,
    562, 590, 619, 649, 681, 715, 750, 787, 825, 866, 909, 953,
)

E96_DIGITS = (
    100, 102, 105, 107, 110, 113, 115, 118, 121, 124, 127, 130,
    133, 137, 140, 143, 147, 150, 154, 158, 162, 165, 169, 174,
    178, 182, 187, 191, 196, 200, 205, 210, 215, 221, 226, 232,
    237, 243, 249, 255, 261, 267, 274, 280, 287, 294, 301, 309,
    316, 324, 332, 340, 348, 357, 365, 374, 383, 392, 402, 412,
    422, 432, 442, 453, 464, 475, 487, 499, 511, 523, 536, 549,
    562, 576, 590, 604, 619, 634, 649, 665, 681, 698, 715, 732,
    750, 768, 787, 806, 825, 845, 866, 887, 909, 931, 953, 976,
)

E192_DIGITS = (
    100, 101, 102, 104, 105, 106, 107, 109, 110, 111, 113, 114,
    115, 117, 118, 120, 121, 123, 124, 126, 127, 129, 130, 132,
    133, 135, 137, 138, 140, 142, 143, 145, 147, 149, 150, 152,
    154, 156, 158, 160, 162, 164, 165, 167, 169, 172, 174, 176,
    178, 180, 182, 184, 187, 189, 191, 193, 196, 198, 200, 203,
    205, 208, 210, 213, 215, 218, 221, 223, 226, 229, 232, 234,
    237, 240, 243, 246, 249, 252, 255, 258, 261, 264, 267, 271,
    274, 277, 280, 284, 287, 291, 294, 298, 301, 305, 309, 312,
    316, 320, 324, 328, 332, 336, 340, 344, 348, 352, 357, 361,
    365, 370, 374, 379, 383, 388, 392, 397, 402, 407, 412, 417,
    422, 427, 432, 437, 442, 448, 453, 459, 464, 470, 475, 481,
    487, 493, 499, 505, 511, 517, 523, 530, 536, 542, 549, 556,
    562, 569, 576, 583, 590, 597, 604, 612, 619, 626, 634, 642,
    649, 657, 665, 673, 681, 690, 698, 706, 715, 723, 732, 741,
    750, 759, 768, 777, 787, 796, 806, 816, 825, 835, 845, 856,
    866, 876, 887, 898, 909, 920, 931, 942, 953, 965, 976, 988,
)


class ESeries(str, Enum):
    E3 = "E3"
    E6 = "E6"
    E12 = "E12"
    E24 = "E24"
    E48 = "E48"
    E96 = "E96"
    E192 = "E192"

    @classmethod
    def parse(cls, series: Union[str, "ESeries"]) -> "ESeries":
        """Resolve a series name (case-insensitive, full name only)."""
        if isinstance(series, ESeries):
            return series
        if not isinstance(series, str):
            raise InvalidInputError(f"Series must be a string, got {type(series).__name__}")
        try:
            return cls(series.strip().upper())
        except ValueError:
            names = [s.value for s in cls]
            raise InvalidInputError(f"Series '{series}' is not supported. Must be one of: {names}") from None

    @property
    def digits(self) -> Tuple[int, ...]:
        """Base values of one decade as three significant digits."""
        return _DIGITS[self]

    @property
    def base_values(self) -> Tuple[float, ...]:
        """Base values of one decade as mantissas in [1, 10)."""
        return tuple(d / 100 for d in _DIGITS[self])


_DIGITS = {
    ESeries.E3: E3_DIGITS,
    ESeries.E6: E6_DIGITS,
    ESeries.E12: E12_DIGITS,
    ESeries.E24: E24_DIGITS,
    ESeries.E48: E48_DIGITS,
    ESeries.E96: E96_DIGITS,
    ESeries.E192: E192_DIGITS,
}


class RoundingPolicy(str, Enum):
    """How bin edges between adjacent series values are placed."""
    HARMONIC = "harmonic"      # 2ab/(a+b), approximates symmetric tolerance bands
    ARITHMETIC = "arithmetic"  # midpoint
    UP = "up"                  # ceiling
    DOWN = "down"              # floor

    @classmethod
    def parse(cls, policy: Union[str, "RoundingPolicy"]) -> "RoundingPolicy":
        """Resolve a policy name or any non-empty prefix of it.

        'ceiling' and 'floor' are accepted as aliases of 'up' and 'down'.
        """
        if isinstance(policy, RoundingPolicy):
            return policy
        if not isinstance(policy, str):
            raise InvalidInputError(f"Rounding policy must be a string, got {type(policy).__name__}")
        text = policy.strip().lower()
        if text:
            for name, member in _POLICY_NAMES:
                if name.startswith(text):
                    return member
        raise InvalidInputError(f"Rounding policy '{policy}' is not supported.")


# Every name starts with a different letter, so any prefix is unambiguous.
_POLICY_NAMES = (
    ('harmonic', RoundingPolicy.HARMONIC),
    ('arithmetic', RoundingPolicy.ARITHMETIC),
    ('up', RoundingPolicy.UP),
    ('ceiling', RoundingPolicy.UP),
    ('down', RoundingPolicy.DOWN),
    ('floor', RoundingPolicy.DOWN),
)


def decade_values(series: ESeries, first_decade: int, last_decade: int) -> np.ndarray:
    """
    Extrapolate the base series over whole decades.

    Returns mantissa * 10**d for every base mantissa and every decade d in
    [first_decade, last_decade], strictly increasing.
    """
    digits = np.asarray(series.digits, dtype=float)
    exponents = np.arange(first_decade - 2, last_decade - 1)
    # Divide for negative exponents: 470 / 100 rounds correctly, 470 * 0.01 does not
    with np.errstate(over='ignore'):
        scale = 10.0 ** np.abs(exponents).astype(float)
        grid = np.where(
            exponents[:, None] >= 0,
            digits[None, :] * scale[:, None],
            digits[None, :] / scale[:, None],
        )
    return grid.ravel()


# SI prefix table
_SI_PREFIXES = [
    (1e-15, 'f'),
    (1e-12, 'p'),
    (1e-9,  'n'),
    (1e-6,  'µ'),
    (1e-3,  'm'),
    (1e0,   ''),
    (1e3,   'k'),
    (1e6,   'M'),
    (1e9,   'G'),
]


def engineering_notation(value: float, unit: str = '', precision: int = 3) -> str:
    """
    Format a value in engineering notation with SI prefix.

    Examples:
        engineering_notation(1000, 'Ω')     → '1kΩ'
        engineering_notation(0.0001, 'F')    → '100µF'
        engineering_notation(4700, 'Ω')      → '4.7kΩ'
        engineering_notation(float('nan'))   → 'NaN'
    """
    if value != value:
        return f"NaN{unit}"
    if value == 0:
        return f"0{unit}"

    abs_value = abs(value)
    sign = '-' if value < 0 else ''

    for scale, prefix in reversed(_SI_PREFIXES):
        if abs_value >= scale:
            scaled = round(abs_value / scale, 9)
            if scaled == int(scaled):
                return f"{sign}{int(scaled)}{prefix}{unit}"
            return f"{sign}{scaled:.{precision}g}{prefix}{unit}"

    # Fallback for extremely small values
    return f"{value:.{precision}g}{unit}"
