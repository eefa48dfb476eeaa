"""
Tests for the equivalent-circuit search.

Validates:
1. Worked examples for series (direct sum) and parallel (reciprocal sum)
2. Batch and iterative strategies return identical selections
3. Tie-break: lowest lexicographic multiset wins
4. Brute-force cross-check of the minimal error
5. Undefined targets and argument validation
6. Batch memory bounded in the number of targets; many-component searches
"""

import itertools
import math
import tracemalloc

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from eseries.circuit import (
    BatchSearch,
    IterativeSearch,
    MAX_BATCH_DIMS,
    MAX_BATCH_ELEMENTS,
    equivalent_circuit,
    select_strategy,
    series_window,
)
from eseries.errors import InvalidInputError


class TestSeriesWindow:
    """Test the component range restriction."""

    def test_e12_decades(self):
        window = series_window('E12', [10, 1000])
        assert len(window) == 25
        assert window[0] == 10.0
        assert window[-1] == 1000.0

    def test_bounds_between_series_values(self):
        window = series_window('E6', [5, 5000])
        assert window[0] == pytest.approx(6.8)
        assert window[-1] == pytest.approx(4700)

    def test_no_extrapolation_beyond_bounds(self):
        window = series_window('E24', [1, 1000])
        assert window.min() >= 1
        assert window.max() <= 1000
        assert len(window) == 73

    def test_empty_window(self):
        assert len(series_window('E6', [1.6, 2.1])) == 0


class TestExamples:
    """Worked examples."""

    def test_series_sum_exact(self):
        result = equivalent_circuit(12345, 'E12', [10, 20000], 3, False)
        assert result.equivalent[0] == 12345
        assert result.components[0].tolist() == [15, 330, 12000]
        assert result.index[0].tolist() == [2, 18, 37]
        assert result.pns[result.index[0].astype(int)].tolist() == [15, 330, 12000]
        assert result.strategy == 'batch'

    def test_parallel_resistors(self):
        result = equivalent_circuit(123, 'E6', [5, 5000], 3, True)
        assert result.equivalent[0] == pytest.approx(123.13, abs=0.01)
        assert result.components[0] == pytest.approx([150, 1000, 2200])
        assert result.reciprocal is True

    def test_equivalent_matches_components(self):
        result = equivalent_circuit([0.8, 8, 88, 888], 'E6', [1, 5000], 2, True)
        for row, eqv in zip(result.components, result.equivalent):
            assert 1.0 / np.sum(1.0 / row) == pytest.approx(eqv)

    def test_components_ascending(self):
        result = equivalent_circuit([19, 10, 1982, 777], 'E24', [1, 1000], 3, False)
        assert np.all(np.diff(result.components, axis=1) >= 0)

    def test_single_component_is_nearest_value(self):
        result = equivalent_circuit(50, 'E12', [10, 100], 1, False)
        assert result.components[0].tolist() == [47]

    def test_target_beyond_reach_uses_largest(self):
        result = equivalent_circuit(1e6, 'E6', [1, 5000], 2, False)
        assert result.components[0].tolist() == [4700, 4700]
        assert result.equivalent[0] == 9400

    def test_matrix_targets_flattened(self):
        result = equivalent_circuit(np.array([[100, 200], [300, 400]]), 'E12', [10, 1000], 2, False)
        assert result.equivalent.shape == (4,)
        assert result.components.shape == (4, 2)


class TestUndefinedTargets:
    """Invalid targets give NaN rows regardless of other parameters."""

    @pytest.mark.parametrize('reciprocal', [True, False])
    def test_invalid_targets(self, reciprocal):
        result = equivalent_circuit([0, -5, np.inf, np.nan, 100], 'E12', [10, 1000], 2, reciprocal)
        assert np.all(np.isnan(result.equivalent[:4]))
        assert np.all(np.isnan(result.components[:4]))
        assert np.all(np.isnan(result.index[:4]))
        assert np.isfinite(result.equivalent[4])

    def test_invalid_targets_iterative(self):
        result = equivalent_circuit([0, np.inf], 'E12', [10, 1000], 2, False, max_elements=0)
        assert result.strategy == 'iterative'
        assert np.all(np.isnan(result.equivalent))

    def test_empty_window_gives_nan(self):
        result = equivalent_circuit([2.0], 'E6', [1.6, 2.1], 2, False)
        assert np.isnan(result.equivalent[0])


class TestStrategies:
    """Both strategies must agree everywhere except in speed."""

    def test_selection(self):
        assert isinstance(select_strategy(40, 3), BatchSearch)
        assert isinstance(select_strategy(73, 4), IterativeSearch)
        assert isinstance(select_strategy(2 ** 11, 2, MAX_BATCH_ELEMENTS), BatchSearch)
        assert isinstance(select_strategy(2 ** 11 + 1, 2, MAX_BATCH_ELEMENTS), IterativeSearch)

    def test_selection_caps_dimensions(self):
        assert isinstance(select_strategy(1, MAX_BATCH_DIMS), BatchSearch)
        assert isinstance(select_strategy(1, MAX_BATCH_DIMS + 1), IterativeSearch)
        assert isinstance(select_strategy(2, 40, 2 ** 64), IterativeSearch)

    @pytest.mark.parametrize('reciprocal', [True, False])
    @pytest.mark.parametrize('count', [1, 2, 3])
    def test_strategies_identical(self, reciprocal, count):
        rng = np.random.default_rng(count)
        targets = 10 ** rng.uniform(0, 3.5, size=60)
        batch = equivalent_circuit(targets, 'E12', [10, 1000], count, reciprocal)
        iterative = equivalent_circuit(targets, 'E12', [10, 1000], count, reciprocal, max_elements=0)
        assert batch.strategy == 'batch'
        assert iterative.strategy == 'iterative'
        np.testing.assert_array_equal(batch.index, iterative.index)
        np.testing.assert_array_equal(batch.equivalent, iterative.equivalent)

    @pytest.mark.parametrize('block_size', [1, 2, 3, 1000])
    def test_tie_goes_to_first_multiset(self, block_size):
        """31 is exactly 1 away from 10+22 and from 15+15; 10+22 comes first."""
        values = np.array([10.0, 15.0, 22.0, 33.0, 47.0, 68.0, 100.0])
        targets = np.array([31.0])
        eqv_b, idx_b = BatchSearch().search(targets, values, 2, False)
        eqv_i, idx_i = IterativeSearch(block_size=block_size).search(targets, values, 2, False)
        assert idx_b[0].tolist() == [0, 2]
        assert idx_i[0].tolist() == [0, 2]
        assert eqv_b[0] == eqv_i[0] == 32.0


class TestSearchLimits:
    """Large counts and many targets stay within numpy's and memory limits."""

    def test_single_value_window_many_components(self):
        result = equivalent_circuit(100.0, 'E12', [47, 47], 70, False)
        assert result.strategy == 'iterative'
        assert result.components[0].tolist() == [47.0] * 70
        assert result.index[0].tolist() == [0.0] * 70
        assert result.equivalent[0] == 47.0 * 70

    def test_single_value_window_parallel(self):
        result = equivalent_circuit(10.0, 'E6', [47, 47], 40, True)
        assert result.strategy == 'iterative'
        assert result.equivalent[0] == pytest.approx(47.0 / 40)

    @pytest.mark.parametrize('max_elements', [1, 500, 10 ** 6])
    def test_target_blocks_do_not_change_picks(self, max_elements):
        rng = np.random.default_rng(7)
        targets = 10 ** rng.uniform(1, 3.5, size=50)
        values = series_window('E24', [10, 1000])
        eqv_ref, idx_ref = BatchSearch().search(targets, values, 2, True)
        eqv, idx = BatchSearch(max_elements).search(targets, values, 2, True)
        np.testing.assert_array_equal(idx, idx_ref)
        np.testing.assert_array_equal(eqv, eqv_ref)

    def test_peak_memory_independent_of_target_count(self):
        """The error array is reduced in target blocks sized by max_elements."""
        bounds = [1, 10 ** 3.3]
        budget = 2 ** 19
        window = series_window('E192', bounds)
        assert len(window) ** 2 <= budget

        def peak(n):
            tracemalloc.start()
            try:
                result = equivalent_circuit(np.full(n, 123.0), 'E192', bounds, 2, False, max_elements=budget)
                _, traced_peak = tracemalloc.get_traced_memory()
            finally:
                tracemalloc.stop()
            assert result.strategy == 'batch'
            return traced_peak

        peak(1)
        small = peak(10)
        large = peak(400)
        assert large < 1.5 * small


class TestBruteForce:
    """Cross-check the minimal error against exhaustive enumeration."""

    def test_parallel_e12_three_components(self):
        target = 123.0
        result = equivalent_circuit(target, 'E12', [10, 1000], 3, True)
        window = series_window('E12', [10, 1000])

        best = math.inf
        for combo in itertools.combinations_with_replacement(window, 3):
            value = 1.0 / sum(1.0 / c for c in combo)
            best = min(best, abs(target - value))

        achieved = abs(target - result.equivalent[0])
        assert achieved == pytest.approx(best, abs=1e-9)


class TestValidation:
    """Malformed arguments raise InvalidInputError."""

    @pytest.mark.parametrize('bounds', [[10], [10, 100, 1000], [0, 100], [-10, 100], [10, np.inf], [100, 10]])
    def test_bad_bounds(self, bounds):
        with pytest.raises(InvalidInputError):
            equivalent_circuit(50, 'E12', bounds, 2, False)

    @pytest.mark.parametrize('count', [0, -1, 2.5, True, 'three', [2, 3], None])
    def test_bad_count(self, count):
        with pytest.raises(InvalidInputError):
            equivalent_circuit(50, 'E12', [10, 100], count, False)

    def test_integral_float_count_accepted(self):
        result = equivalent_circuit(50, 'E12', [10, 100], 2.0, False)
        assert result.components.shape == (1, 2)

    @pytest.mark.parametrize('reciprocal', ['yes', 2, None, 0.5])
    def test_bad_reciprocal(self, reciprocal):
        with pytest.raises(InvalidInputError):
            equivalent_circuit(50, 'E12', [10, 100], 2, reciprocal)

    @pytest.mark.parametrize('reciprocal', [0, 1, np.bool_(True)])
    def test_boolean_like_reciprocal(self, reciprocal):
        result = equivalent_circuit(50, 'E12', [10, 100], 2, reciprocal)
        assert result.reciprocal is bool(reciprocal)

    def test_non_numeric_targets(self):
        with pytest.raises(InvalidInputError):
            equivalent_circuit(['50'], 'E12', [10, 100], 2, False)

    def test_unknown_series(self):
        with pytest.raises(InvalidInputError):
            equivalent_circuit(50, 'E10', [10, 100], 2, False)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
