"""
Equivalent-circuit search over preferred component values.

Finds, for each target, the multiset of `count` series values whose
combined value is closest to the target. Which summation to use:

    reciprocal | sum of            | series circuit of   | parallel circuit of
    -----------|-------------------|---------------------|--------------------
    True       | value reciprocals | capacitors          | resistors, inductors
    False      | values            | resistors, inductors| capacitors

Candidates are compared by log(|target - combined|). Two interchangeable
strategies do the search: BatchSearch builds every combination at once,
IterativeSearch walks them in blocks. The cheaper one that fits under the
element budget is picked before dispatch; both return the same selection.
Ties go to the multiset that comes first in lexicographic index order.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from eseries.errors import InvalidInputError
from eseries.rounding import as_real_array, round_to_series
from eseries.series import ESeries

logger = logging.getLogger(__name__)

# Largest outer-sum array (series size ** count) the batch strategy may build
MAX_BATCH_ELEMENTS = 2 ** 22

# Multisets evaluated per block by the iterative strategy
ITERATIVE_BLOCK_SIZE = 2 ** 14

# Outer-sum arrays have one dimension per component; numpy 1.x caps ndim at 32
MAX_BATCH_DIMS = 32


@dataclass
class CircuitResult:
    """Output of equivalent_circuit().

    Row i describes target i (input flattened in C order). components and
    index have `count` columns in ascending value order; index is 0-based
    into pns. Undefined targets are NaN across the row.
    """
    equivalent: np.ndarray
    components: np.ndarray
    index: np.ndarray
    pns: np.ndarray
    reciprocal: bool
    strategy: str


def _combine(values: np.ndarray, reciprocal: bool) -> np.ndarray:
    if reciprocal:
        return 1.0 / values
    return values


def _log_error(targets: np.ndarray, combined: np.ndarray) -> np.ndarray:
    """log|target - combined| for every (target, candidate) pair."""
    error = np.subtract.outer(targets, combined)
    np.abs(error, out=error)
    with np.errstate(divide='ignore'):
        np.log(error, out=error)
    return error


class SearchStrategy:
    """Interface shared by the search strategies."""

    name = 'base'

    def search(
        self,
        targets: np.ndarray,
        values: np.ndarray,
        count: int,
        reciprocal: bool,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Best multiset for each target.

        Args:
            targets: 1-D array of positive finite targets.
            values: Series window, strictly increasing.
            count: Components per circuit.
            reciprocal: Sum reciprocals instead of values.

        Returns:
            (equivalent, index): combined values (n,) and non-decreasing
            integer indices into values (n, count).
        """
        raise NotImplementedError


class IterativeSearch(SearchStrategy):
    """Walks the multisets block by block, keeping a running best per target."""

    name = 'iterative'

    def __init__(self, block_size: int = ITERATIVE_BLOCK_SIZE):
        self.block_size = block_size

    def search(self, targets, values, count, reciprocal):
        terms = _combine(values, reciprocal)
        n = len(targets)
        best_error = np.full(n, np.inf)
        best_equivalent = np.full(n, np.nan)
        best_index = np.zeros((n, count), dtype=int)

        combos = itertools.combinations_with_replacement(range(len(values)), count)
        while True:
            block = np.array(list(itertools.islice(combos, self.block_size)), dtype=int)
            if not len(block):
                break
            block = block.reshape(-1, count)
            total = terms[block[:, 0]]
            for k in range(1, count):
                total = total + terms[block[:, k]]
            combined = _combine(total, reciprocal)

            error = _log_error(targets, combined)
            pick = np.argmin(error, axis=1)
            block_error = error[np.arange(n), pick]
            # Strict comparison keeps the earlier block on ties
            better = block_error < best_error
            best_error[better] = block_error[better]
            best_equivalent[better] = combined[pick[better]]
            best_index[better] = block[pick[better]]

        return best_equivalent, best_index


class BatchSearch(SearchStrategy):
    """Builds the full outer sum, then reduces it a block of targets at a time.

    Rows of targets are reduced in blocks so the (targets x multisets) error
    array never holds more than max_elements entries.
    """

    name = 'batch'

    def __init__(self, max_elements: int = MAX_BATCH_ELEMENTS):
        self.max_elements = max_elements

    def search(self, targets, values, count, reciprocal):
        terms = _combine(values, reciprocal)
        size = len(values)
        shape = (size,) * count

        # total[i0, i1, ..., ik] = terms[i0] + terms[i1] + ... + terms[ik]
        total = terms
        for _ in range(1, count):
            total = total[..., None] + terms

        # Keep each multiset once: the non-decreasing index tuples. In C
        # order they appear in the same sequence as the iterative walk.
        axis = np.arange(size)
        ordered = np.ones(shape, dtype=bool)
        for k in range(1, count):
            prev = axis.reshape([-1 if d == k - 1 else 1 for d in range(count)])
            curr = axis.reshape([-1 if d == k else 1 for d in range(count)])
            ordered &= prev <= curr
        flat = np.flatnonzero(ordered)
        del ordered
        combined = _combine(total.reshape(-1)[flat], reciprocal)
        del total

        rows = max(1, self.max_elements // len(combined))
        pick = np.empty(len(targets), dtype=int)
        for start in range(0, len(targets), rows):
            block = targets[start:start + rows]
            pick[start:start + rows] = np.argmin(_log_error(block, combined), axis=1)

        index = np.stack(np.unravel_index(flat[pick], shape), axis=1).reshape(-1, count)
        return combined[pick], index


def select_strategy(series_size: int, count: int, max_elements: int = MAX_BATCH_ELEMENTS) -> SearchStrategy:
    """Pick the batch strategy unless its outer sum would exceed max_elements.

    Counts above MAX_BATCH_DIMS always go to the iterative walk, since the
    outer sum has one array dimension per component.
    """
    if count > MAX_BATCH_DIMS or series_size ** count > max_elements:
        return IterativeSearch()
    return BatchSearch(max_elements)


def _parse_bounds(bounds) -> Tuple[float, float]:
    arr = as_real_array(bounds, 'bounds').ravel()
    if arr.size != 2:
        raise InvalidInputError(f"Input <bounds> must have exactly two elements, got {arr.size}")
    low, high = float(arr[0]), float(arr[1])
    if not (np.isfinite(low) and np.isfinite(high)) or low <= 0:
        raise InvalidInputError(f"Input <bounds> must be positive and finite, got [{low}, {high}]")
    if low > high:
        raise InvalidInputError(f"Input <bounds> must be [min, max], got [{low}, {high}]")
    return low, high


def _parse_count(count) -> int:
    if isinstance(count, (bool, np.bool_, str, bytes)) or np.ndim(count) != 0:
        raise InvalidInputError(f"Input <count> must be a positive integer scalar, got {count!r}")
    try:
        number = float(count)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Input <count> must be a positive integer scalar, got {count!r}") from None
    if not number.is_integer() or number < 1:
        raise InvalidInputError(f"Input <count> must be a positive integer scalar, got {count!r}")
    return int(number)


def _parse_reciprocal(reciprocal) -> bool:
    if isinstance(reciprocal, (bool, np.bool_)):
        return bool(reciprocal)
    if isinstance(reciprocal, (int, np.integer)) and reciprocal in (0, 1):
        return bool(reciprocal)
    raise InvalidInputError(f"Input <reciprocal> must be a boolean, got {reciprocal!r}")


def series_window(series: Union[str, ESeries], bounds) -> np.ndarray:
    """All values of the series between bounds[0] and bounds[1], inclusive."""
    low, high = _parse_bounds(bounds)
    pns = round_to_series([low, high], series).pns
    return pns[(pns >= low) & (pns <= high)]


def equivalent_circuit(
    x,
    series: Union[str, ESeries],
    bounds,
    count: int,
    reciprocal: bool,
    max_elements: int = MAX_BATCH_ELEMENTS,
) -> CircuitResult:
    """
    Select series/parallel component values that best match each target.

    Args:
        x: Real numeric targets, any shape (flattened to rows).
        series: E-series of the components, e.g. 'E12'.
        bounds: [min, max] permitted component values.
        count: Number of components in the circuit.
        reciprocal: True to sum reciprocals (parallel R/L, series C),
            False to sum values (series R/L, parallel C).
        max_elements: Batch search budget; above it the iterative search
            is used.

    Returns:
        CircuitResult. Targets that are zero, negative, infinite or NaN
        give NaN rows.

    Example:
        equivalent_circuit(12345, 'E12', [10, 20000], 3, False)
        → equivalent 12345 from components [15, 330, 12000]
    """
    targets = as_real_array(x).ravel()
    series = ESeries.parse(series)
    pns = series_window(series, bounds)
    count = _parse_count(count)
    reciprocal = _parse_reciprocal(reciprocal)

    n = targets.size
    equivalent = np.full(n, np.nan)
    components = np.full((n, count), np.nan)
    index = np.full((n, count), np.nan)

    strategy = select_strategy(len(pns), count, max_elements)
    result = CircuitResult(equivalent, components, index, pns, reciprocal, strategy.name)

    ok = np.isfinite(targets) & (targets > 0)
    if not ok.any() or not len(pns):
        return result

    logger.debug(
        "Equivalent circuit search: %d targets, %d values, %d components, %s strategy",
        int(ok.sum()), len(pns), count, strategy.name,
    )
    best, picked = strategy.search(targets[ok], pns, count, reciprocal)

    equivalent[ok] = best
    index[ok] = picked
    components[ok] = pns[picked]
    return result
