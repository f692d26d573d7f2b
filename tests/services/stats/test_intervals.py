import pytest

from abadvisor.services.stats.intervals import Interval, diff_ci_normal, wilson_ci


class TestWilsonInterval:
    def test_known_value(self):
        ci = wilson_ci(5, 100)
        assert ci.low == pytest.approx(0.0215, abs=1e-3)
        assert ci.high == pytest.approx(0.1118, abs=1e-3)

    def test_zero_traffic(self):
        assert wilson_ci(0, 0) == Interval(0.0, 0.0)

    def test_zero_successes_pins_low(self):
        ci = wilson_ci(0, 50)
        assert ci.low == 0.0
        assert 0.0 < ci.high < 1.0

    def test_all_successes_pins_high(self):
        ci = wilson_ci(50, 50)
        assert ci.high == 1.0
        assert 0.0 < ci.low < 1.0

    @pytest.mark.parametrize(
        "x,n", [(0, 1), (1, 1), (1, 10), (3, 12), (50, 1000), (999, 1000), (5500, 100000)]
    )
    def test_contains_rate(self, x, n):
        ci = wilson_ci(x, n)
        assert 0.0 <= ci.low <= x / n <= ci.high <= 1.0

    def test_narrows_with_more_data(self):
        assert wilson_ci(500, 10000).width < wilson_ci(50, 1000).width

    def test_wider_for_higher_confidence(self):
        assert wilson_ci(50, 1000, z=2.576).width > wilson_ci(50, 1000).width


class TestDiffInterval:
    def test_contains_difference(self):
        ci = diff_ci_normal(0.05, 1000, 0.066, 1000)
        assert ci.low < 0.016 < ci.high

    def test_symmetric_around_difference(self):
        ci = diff_ci_normal(0.10, 500, 0.15, 400)
        assert (ci.low + ci.high) / 2 == pytest.approx(0.05)

    def test_significant_difference_excludes_zero(self):
        ci = diff_ci_normal(0.05, 100000, 0.055, 100000)
        assert ci.low > 0

    def test_zero_width_at_extremes(self):
        ci = diff_ci_normal(0.0, 100, 1.0, 100)
        assert ci.low == ci.high == 1.0

    @pytest.mark.parametrize("n1,n2", [(0, 100), (100, 0), (-1, 100)])
    def test_rejects_empty_samples(self, n1, n2):
        with pytest.raises(ValueError):
            diff_ci_normal(0.1, n1, 0.1, n2)
