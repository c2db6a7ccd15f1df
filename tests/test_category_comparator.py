# tests/test_category_comparator.py - Tests for the category comparison
"""
Unit tests for the CategoryComparator class.
"""

import pytest
from spectroscope.stats.category_comparator import CategoryComparator
from spectroscope.stats.inputs import CategoryCount


def make_counts(s0, s1):
    """Aligned counts with ids 1..n"""
    return [
        CategoryCount(category_id=i, name=f"cat{i}", s0_count=a, s1_count=b)
        for i, (a, b) in enumerate(zip(s0, s1), 1)
    ]


class TestCategoryComparator:
    """Test cases for CategoryComparator"""

    def test_comparator_initialization(self):
        """Test default thresholds"""
        comparator = CategoryComparator()
        assert comparator.smoothing == 1
        assert comparator.min_expected_count == 5
        assert comparator.significance == 0.05

    def test_shifted_distribution_rejects(self):
        """Test a category that tripled is detected and ranked first"""
        comparator = CategoryComparator()

        comparison = comparator.compare(make_counts([10, 8, 6], [12, 9, 20]))

        assert comparison.degrees_of_freedom == 2
        assert comparison.statistic == pytest.approx(4 / 11 + 1 / 9 + 196 / 7)
        assert comparison.p_value == pytest.approx(6.5e-7, rel=0.02)
        assert comparison.reject_null
        assert comparison.flag == 1
        assert comparison.s0_small_fraction == 0
        assert comparison.s1_small_fraction == 0

        ranked = [(c.category_id, c.s0_count, c.s1_count) for c in comparison.contributions]
        assert ranked == [(3, 7, 21), (1, 11, 13), (2, 9, 10)]
        assert comparison.contributions[0].contribution == pytest.approx(28.0)

    def test_identical_counts_accept(self):
        """Test identical snapshots give a zero statistic and p-value 1"""
        comparator = CategoryComparator()

        comparison = comparator.compare(make_counts([10, 20, 30], [10, 20, 30]))

        assert comparison.statistic == 0
        assert comparison.p_value == pytest.approx(1.0)
        assert not comparison.reject_null
        assert all(c.contribution == 0 for c in comparison.contributions)

    def test_small_categories_dropped(self):
        """Test categories with a small smoothed s0 count are excluded"""
        comparator = CategoryComparator()

        comparison = comparator.compare(make_counts([1, 10, 20, 30], [10, 3, 20, 30]))

        assert comparison.dropped_ids == [1]
        assert sorted(c.category_id for c in comparison.contributions) == [2, 3, 4]
        assert comparison.degrees_of_freedom == 2
        assert comparison.s0_small_fraction == 0.25
        assert comparison.s1_small_fraction == 0.25

    def test_fractions_cover_own_table_only(self):
        """Test a category absent from s0 does not count toward s0's fraction"""
        counts = make_counts([10, 20, 30], [12, 18, 33])
        counts.append(CategoryCount(category_id=4, name="mkdir", s0_count=0, s1_count=2, in_s0=False))

        comparison = CategoryComparator().compare(counts)

        assert comparison.s0_small_fraction == 0.0
        assert comparison.s1_small_fraction == 0.25
        assert comparison.dropped_ids == [4]

    def test_single_category_is_indeterminate(self):
        """Test fewer than two retained categories does not reject"""
        comparator = CategoryComparator()

        comparison = comparator.compare(make_counts([10, 1], [40, 3]))

        assert comparison.indeterminate
        assert comparison.degrees_of_freedom == 0
        assert comparison.p_value == 1.0
        assert comparison.flag == 0

    def test_no_categories(self):
        """Test empty input"""
        comparison = CategoryComparator().compare([])

        assert comparison.indeterminate
        assert comparison.s0_small_fraction == 0.0
        assert comparison.contributions == []

    def test_custom_significance(self):
        """Test the significance level comes from configuration"""
        counts = make_counts([100, 100, 100], [110, 95, 100])

        default = CategoryComparator().compare(counts)
        lenient = CategoryComparator(config={'significance': 0.99}).compare(counts)

        assert not default.reject_null
        assert lenient.reject_null

    def test_compare_files(self, tmp_path):
        """Test comparing two count files"""
        s0 = tmp_path / "s0_counts.dat"
        s1 = tmp_path / "s1_counts.dat"
        s0.write_text("1 10 read\n2 8 write\n3 6 getattr\n")
        s1.write_text("3 20 getattr\n1 12 read\n2 9 write\n")

        comparison = CategoryComparator().compare_files(str(s0), str(s1))

        assert comparison.reject_null
        assert comparison.contributions[0].name == "getattr"
