# tests/test_edge_comparator.py - Tests for the edge latency comparison
"""
Unit tests for the EdgeLatencyComparator class.
"""

import numpy as np
import pytest
from spectroscope.stats.edge_comparator import EdgeDecision, EdgeLatencyComparator
from spectroscope.stats.inputs import SparseLatencyTable


LOW = [1000.0 * i for i in range(1, 11)]          # 1ms .. 10ms
HIGH = [50000.0 + 1000.0 * i for i in range(1, 11)]  # 51ms .. 60ms


class TestEdgeLatencyComparator:
    """Test cases for EdgeLatencyComparator"""

    def test_comparator_initialization(self):
        """Test default configuration"""
        comparator = EdgeLatencyComparator()
        assert comparator.significance == 0.05
        assert comparator.smoothing_divisor == 1000
        assert comparator.min_effective_sample == 4
        assert comparator.workers == 1

    def test_no_data(self):
        """Test a row without observations in either snapshot"""
        result = EdgeLatencyComparator().compare_row(9, [], [])

        assert result.decision is EdgeDecision.NO_DATA
        assert result.p_value == 0.0
        assert result.flag == 0
        assert (result.s0_mean, result.s0_std, result.s1_mean, result.s1_std) == (0, 0, 0, 0)

    def test_only_in_s1(self):
        """Test an edge that only exists in the second snapshot"""
        result = EdgeLatencyComparator().compare_row(5, [], [1000, 1500, 2000])

        assert result.decision is EdgeDecision.ONLY_IN_S1
        assert result.p_value == -1.0
        assert not result.reject_null
        assert result.s1_mean == pytest.approx(1500.0)
        assert result.s1_std == pytest.approx(500.0)

    def test_only_in_s0(self):
        """Test an edge that disappeared in the second snapshot"""
        result = EdgeLatencyComparator().compare_row(2, [300], [])

        assert result.decision is EdgeDecision.ONLY_IN_S0
        assert result.p_value == -2.0
        assert result.s0_mean == 300.0
        assert result.s0_std == 0.0

    def test_insufficient_data(self):
        """Test two observations per side are too few to test"""
        result = EdgeLatencyComparator().compare_row(7, [100, 200], [150, 250])

        assert result.decision is EdgeDecision.INSUFFICIENT_DATA
        assert result.p_value == -3.0
        assert result.is_sentinel
        assert result.s0_mean == pytest.approx(150.0)
        assert result.s0_std == pytest.approx(70.7107, rel=1e-4)
        assert result.s1_mean == pytest.approx(200.0)

    def test_effective_sample_threshold(self):
        """Test 8 and 8 observations fall just short, 8 and 9 do not"""
        comparator = EdgeLatencyComparator()

        assert comparator.effective_sample_size(8, 8) < 4
        assert comparator.effective_sample_size(8, 9) >= 4

        short = comparator.compare_row(1, LOW[:8], LOW[:8])
        enough = comparator.compare_row(1, LOW[:8], LOW[:9])

        assert short.decision is EdgeDecision.INSUFFICIENT_DATA
        assert enough.decision is EdgeDecision.TESTED

    def test_slower_s1_rejects(self):
        """Test a clear latency increase is detected"""
        result = EdgeLatencyComparator().compare_row(3, LOW, HIGH)

        assert result.decision is EdgeDecision.TESTED
        assert not result.is_sentinel
        assert result.reject_null
        assert result.p_value < 1e-4
        assert result.s0_samples == 10
        assert result.s1_samples == 10

    def test_identical_latencies_accept(self):
        """Test identical latency sets do not reject"""
        result = EdgeLatencyComparator().compare_row(3, LOW, LOW)

        assert not result.reject_null
        assert result.p_value == pytest.approx(1.0)

    def test_faster_s1_is_not_flagged(self):
        """Test the test is one-sided: only slowdowns are flagged"""
        result = EdgeLatencyComparator().compare_row(3, HIGH, LOW)

        assert result.decision is EdgeDecision.TESTED
        assert not result.reject_null
        assert result.p_value == pytest.approx(1.0)

    def test_sub_millisecond_noise_ignored(self):
        """Test latencies that round to the same milliseconds compare equal"""
        s0 = [1000.0 + i for i in range(10)]
        s1 = [1400.0 + i for i in range(10)]

        result = EdgeLatencyComparator().compare_row(1, s0, s1)

        assert result.p_value == pytest.approx(1.0)
        assert result.s1_mean > result.s0_mean

    def test_smooth_rounds_half_away_from_zero(self):
        """Test microseconds become whole milliseconds"""
        smoothed = EdgeLatencyComparator().smooth([1500, 2500, 499, 500])

        assert smoothed.tolist() == [2.0, 3.0, 0.0, 1.0]

    def test_compare_tables(self):
        """Test one result per row, in row order, up to the larger table"""
        s0 = SparseLatencyTable.from_rows({1: LOW, 2: [300], 4: [100, 200]})
        s1 = SparseLatencyTable.from_rows({1: HIGH, 3: [1000, 1500, 2000], 4: [150, 250], 6: []})

        results = EdgeLatencyComparator().compare(s0, s1)

        assert [r.row for r in results] == [1, 2, 3, 4, 5, 6]
        assert [r.decision for r in results] == [
            EdgeDecision.TESTED,
            EdgeDecision.ONLY_IN_S0,
            EdgeDecision.ONLY_IN_S1,
            EdgeDecision.INSUFFICIENT_DATA,
            EdgeDecision.NO_DATA,
            EdgeDecision.NO_DATA,
        ]
        assert results[0].reject_null

    def test_workers_match_serial(self):
        """Test the thread pool gives the same results in the same order"""
        rng = np.random.default_rng(7)
        rows = {i: list(rng.integers(500, 20000, size=12).astype(float)) for i in range(1, 41)}
        s0 = SparseLatencyTable.from_rows(rows)
        s1 = SparseLatencyTable.from_rows({i: [v * 1.5 for v in rows[i]] for i in range(1, 41, 2)})

        serial = EdgeLatencyComparator().compare(s0, s1)
        pooled = EdgeLatencyComparator(config={'workers': 4}).compare(s0, s1)

        assert pooled == serial

    def test_compare_files(self, tmp_path):
        """Test comparing two sparse latency files"""
        s0 = tmp_path / "s0_latencies.dat"
        s1 = tmp_path / "s1_latencies.dat"
        s0.write_text("".join(f"1 {i} {v}\n" for i, v in enumerate(LOW, 1)))
        s1.write_text("".join(f"1 {i} {v}\n" for i, v in enumerate(HIGH, 1)) + "2 1 700\n")

        results = EdgeLatencyComparator().compare_files(str(s0), str(s1))

        assert len(results) == 2
        assert results[0].reject_null
        assert results[1].decision is EdgeDecision.ONLY_IN_S1
