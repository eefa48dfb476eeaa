"""
Rounding of arbitrary values to IEC 60063 preferred numbers.

The series is extrapolated over the decades spanned by the input, bin edges
are placed between adjacent series values according to the rounding policy,
and each input is assigned to the series value inside its bin.

With the default harmonic policy the edge between two neighbours a < b is
2ab/(a+b). Relative to that edge a and b sit the same percentage away
(b - e)/b == (e - a)/a, which is what a symmetric component tolerance
band looks like.
"""

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from eseries.errors import InvalidInputError
from eseries.series import ESeries, RoundingPolicy, decade_values

# Edges at or below this are dropped: products of two such values underflow.
EDGE_FLOOR = np.sqrt(np.finfo(float).tiny)


@dataclass
class RoundResult:
    """Output of round_to_series().

    values and index have the shape of the input; undefined elements are NaN
    in both. index is 0-based into pns, so values == pns[index] elsewhere.
    pns is the shortest contiguous run of the series holding every result
    and edges are the bin edges around it.
    """
    values: np.ndarray
    index: np.ndarray
    pns: np.ndarray
    edges: np.ndarray
    policy: RoundingPolicy


def as_real_array(x, name: str = 'x') -> np.ndarray:
    """Convert input to a float array, rejecting non-real or non-numeric data."""
    arr = np.asarray(x)
    if arr.dtype == bool or not (np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)):
        raise InvalidInputError(f"Input <{name}> must be a real numeric array, got dtype {arr.dtype}")
    return arr.astype(float)


def bin_edges(pns: np.ndarray, policy: RoundingPolicy) -> np.ndarray:
    """Bin edges between adjacent series values, one fewer than pns."""
    lo = pns[:-1]
    hi = pns[1:]
    if policy is RoundingPolicy.HARMONIC:
        with np.errstate(over='ignore', invalid='ignore'):
            edges = 2 * lo * hi / (lo + hi)
            # lo * hi overflows above ~1e154; the scaled form does not
            big = ~np.isfinite(edges) & np.isfinite(hi)
            edges[big] = 2 * lo[big] / (1 + lo[big] / hi[big])
        return edges
    elif policy is RoundingPolicy.ARITHMETIC:
        return (lo + hi) / 2
    elif policy is RoundingPolicy.UP:
        return lo.copy()
    elif policy is RoundingPolicy.DOWN:
        return hi.copy()
    raise InvalidInputError(f"Rounding policy '{policy}' is not supported.")


def _trim_edges(pns: np.ndarray, edges: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Drop underflowing or non-finite edges and the series values beyond them."""
    keep = (edges > EDGE_FLOOR) & np.isfinite(edges)
    if not keep.any():
        return pns[:0], edges[:0]
    first = int(np.argmax(keep))
    last = len(keep) - 1 - int(np.argmax(keep[::-1]))
    return pns[first:last + 2], edges[first:last + 1]


def _assign_bins(x: np.ndarray, edges: np.ndarray, policy: RoundingPolicy) -> Tuple[np.ndarray, np.ndarray]:
    """
    Map values to series positions.

    Returns (pos, inside): pos[i] indexes the series for x[i], inside[i] is
    False where x[i] falls outside the outermost edges.
    """
    if policy is RoundingPolicy.UP:
        # Bins closed on the right: edges[j-1] < x <= edges[j] -> pns[j]
        pos = np.searchsorted(edges, x, side='left')
        inside = (x > edges[0]) & (x <= edges[-1])
    else:
        # Bins closed on the left: edges[j-1] <= x < edges[j] -> pns[j]
        pos = np.searchsorted(edges, x, side='right')
        inside = (x >= edges[0]) & (x <= edges[-1])
        pos = np.minimum(pos, len(edges))
    return pos, inside


def round_to_series(
    x,
    series: Union[str, ESeries],
    policy: Union[str, RoundingPolicy] = RoundingPolicy.HARMONIC,
) -> RoundResult:
    """
    Round values to the nearest preferred number of an E-series.

    Args:
        x: Real numeric scalar or array of any shape.
        series: 'E3', 'E6', 'E12', 'E24', 'E48', 'E96' or 'E192'.
        policy: 'harmonic' (default), 'arithmetic', 'up' or 'down', or any
            prefix of those names ('ceiling'/'floor' are aliases).

    Returns:
        RoundResult. Zero, negative, infinite and NaN elements give NaN.

    Raises:
        InvalidInputError: x is not real numeric, or series/policy unknown.

    Examples:
        round_to_series(500, 'E12').values                     → 470
        round_to_series([5, 42, 18, 100], 'E6', 'up').values   → [6.8, 47, 22, 100]
    """
    arr = as_real_array(x)
    series = ESeries.parse(series)
    policy = RoundingPolicy.parse(policy)

    values = np.full(arr.shape, np.nan)
    index = np.full(arr.shape, np.nan)
    empty = RoundResult(values, index, np.empty(0), np.empty(0), policy)

    flat = arr.ravel()
    with np.errstate(divide='ignore', invalid='ignore'):
        power = np.log10(flat)
    valid = np.isfinite(power)
    if not valid.any():
        return empty

    # Series extrapolated one decade beyond the data on each side
    low = int(np.floor(power[valid].min()))
    high = int(np.ceil(power[valid].max()))
    pns = decade_values(series, low - 1, high + 1)

    pns, edges = _trim_edges(pns, bin_edges(pns, policy))
    if len(edges) < 2:
        return empty

    pos, inside = _assign_bins(flat[valid], edges, policy)
    pos = pos[inside]
    if not len(pos):
        return empty
    where = np.flatnonzero(valid)[inside]

    first = int(pos.min())
    last = int(pos.max())

    flat_values = values.reshape(-1)
    flat_index = index.reshape(-1)
    flat_values[where] = pns[pos]
    flat_index[where] = pos - first

    return RoundResult(
        values=values,
        index=index,
        pns=pns[first:last + 1],
        edges=edges[first - 1:last + 1],
        policy=policy,
    )


def snap_to_e_series(value: float, series: Union[str, ESeries] = 'E24') -> Tuple[float, float]:
    """
    Snap a single value to the nearest standard E-series value.

    Args:
        value: The target value (any unit — resistors in Ohms, capacitors in F, etc.)
        series: Which E-series to use ('E3' through 'E192')

    Returns:
        Tuple of (snapped_value, error_percentage)
        error_percentage is signed: positive means snapped value is higher.
    """
    if not np.isfinite(value) or value <= 0:
        raise InvalidInputError(f"Value must be positive and finite, got {value}")

    snapped = float(round_to_series(value, series).values)
    error_pct = ((snapped - value) / value) * 100
    return snapped, round(error_pct, 4)
