import math
import os
import pytest
import numpy as np

from pyhaar.core.haar import forward
from pyhaar.plot.gnuplot_writer import GnuplotWriter, GnuplotWriterError
from pyhaar.stats.bell_curves import (
    BellCurveError,
    BellInfo,
    histogram_coef,
    normal_curve,
    normal_interval,
    plot_curves,
    plot_freq,
    stddev,
)


class TestStddev:
    def test_mean_and_sample_sigma(self):
        info = stddev([1.0, 2.0, 3.0, 4.0])
        assert info.mean == pytest.approx(2.5)
        assert info.sigma == pytest.approx(math.sqrt(5.0 / 3.0))

    def test_too_few_values(self):
        with pytest.raises(BellCurveError):
            stddev([1.0])
        with pytest.raises(BellCurveError):
            stddev([])


class TestNormalInterval:
    def test_whole_curve_has_unit_area(self):
        area = normal_interval(BellInfo(0.0, 1.0), -8.0, 8.0, 10000)
        assert area == pytest.approx(1.0, abs=1e-3)

    def test_half_curve(self):
        area = normal_interval(BellInfo(5.0, 2.0), 5.0, 30.0, 20000)
        assert area == pytest.approx(0.5, abs=1e-3)

    def test_left_rectangle_rule(self):
        info = BellInfo(0.0, 1.0)
        # 4 steps of 0.5, only the first 3 rectangles are summed
        pdf = lambda x: math.exp(-x * x / 2.0) / math.sqrt(2.0 * math.pi)
        expected = 0.5 * (pdf(0.0) + pdf(0.5) + pdf(1.0))
        assert normal_interval(info, 0.0, 2.0, 4) == pytest.approx(expected)

    def test_too_few_points(self):
        assert normal_interval(BellInfo(0.0, 1.0), 0.0, 1.0, 1) == 0.0

    def test_zero_sigma(self):
        with pytest.raises(BellCurveError):
            normal_interval(BellInfo(0.0, 0.0), -1.0, 1.0, 10)


class TestHistogram:
    def test_small_histogram(self):
        bins = histogram_coef([0.0, 1.0, 2.0, 3.0], 2, 0.0, 3.0)
        # the maximum value sits on the closed end and is not counted
        assert bins == [(0.0, 0.5), (1.5, 0.25)]

    def test_maximum_value_not_counted(self):
        bins = histogram_coef([0.0, 0.1, 0.2, 10.0], 4, 0.0, 10.0)
        assert bins[0] == (0.0, 0.75)
        assert sum(p for _, p in bins) == pytest.approx(0.75)

    def test_trailing_bin_is_emitted(self):
        bins = histogram_coef([0.0, 1.0, 1.2], 2, 0.0, 2.0)
        assert bins == [(0.0, pytest.approx(1.0 / 3.0)), (1.0, pytest.approx(2.0 / 3.0))]

    def test_fractions_bounded(self):
        values = np.sort(np.random.default_rng(5).normal(size=256))
        bins = histogram_coef(values, 32, values[0], values[-1])
        total = sum(p for _, p in bins)
        assert 0.9 < total <= 1.0
        assert len(bins) <= 32
        starts = [s for s, _ in bins]
        assert starts == sorted(starts)

    def test_range_a_few_ulps_wide(self):
        values = [1.0] * 63 + [float(np.nextafter(1.0, 2.0))]
        with pytest.raises(BellCurveError, match="too narrow"):
            histogram_coef(values, 32, values[0], values[-1])

    def test_narrow_range_is_bounded(self):
        high = 1.0 + 64 * float(np.finfo(np.float64).eps)
        values = [1.0] * 10 + [high]
        bins = histogram_coef(values, 32, 1.0, high)
        assert 0 < len(bins) <= 32

    @pytest.mark.parametrize("top", [np.inf, np.nan])
    def test_non_finite_range(self, top):
        values = np.sort(np.array([0.0] * 63 + [top]))
        with pytest.raises(BellCurveError, match="not finite"):
            histogram_coef(values, 32, float(values[0]), float(values[-1]))

    def test_bins_never_exceed_count(self):
        values = np.sort(np.random.default_rng(9).normal(size=1000))
        for num_bins in (1, 7, 32, 100):
            assert len(histogram_coef(values, num_bins, values[0], values[-1])) <= num_bins

    def test_empty_range(self):
        with pytest.raises(BellCurveError):
            histogram_coef([1.0, 1.0], 4, 1.0, 1.0)
        with pytest.raises(BellCurveError):
            histogram_coef([1.0, 2.0], 0, 1.0, 2.0)


def test_normal_curve_bins():
    values = np.random.default_rng(8).normal(loc=3.0, scale=2.0, size=512)
    info, curve = normal_curve(values, 32, float(values.min()), float(values.max()))
    assert info.mean == pytest.approx(3.0, abs=0.3)
    assert len(curve) == 32
    assert curve[0][0] == pytest.approx(values.min())
    assert sum(a for _, a in curve) == pytest.approx(1.0, abs=0.1)


def test_plot_freq_writes_both_files(tmp_path):
    values = np.random.default_rng(2).normal(size=128)
    coef_path, normal_path = plot_freq(values, str(tmp_path))

    assert os.path.basename(coef_path) == "coef128"
    assert os.path.basename(normal_path) == "normal128"

    coef_text = (tmp_path / "coef128").read_text()
    assert coef_text.startswith("#\n# Histogram of Haar coefficients\n#\n")
    assert "# Total area under curve = " in coef_text

    normal_lines = (tmp_path / "normal128").read_text().splitlines()
    assert normal_lines[1] == "# histogram of normal curve"
    assert normal_lines[2].startswith("# mean = ")
    data = [line for line in normal_lines if not line.startswith("#")]
    assert len(data) == 32
    x, y = (float(col) for col in data[0].split())
    assert x == pytest.approx(values.min())
    assert y >= 0.0


def test_plot_curves_bands(tmp_path):
    coeffs = forward(np.random.default_rng(4).normal(size=512))
    written = plot_curves(coeffs, str(tmp_path))
    names = [os.path.basename(p) for p in written]
    assert names == ["coef256", "normal256", "coef128", "normal128", "coef64", "normal64"]


def test_plot_curves_small_buffer(tmp_path):
    assert plot_curves(forward(np.ones(64)), str(tmp_path)) == []
    assert os.listdir(tmp_path) == []


def test_plot_curves_stops_at_first_failure(tmp_path):
    def factory(path):
        if os.path.basename(path).endswith("128"):
            raise GnuplotWriterError(f"cannot write {path}")
        return GnuplotWriter(path)

    coeffs = forward(np.random.default_rng(6).normal(size=512))
    written = plot_curves(coeffs, str(tmp_path), writer_factory=factory)
    assert [os.path.basename(p) for p in written] == ["coef256", "normal256"]


def test_plot_curves_constant_band(tmp_path):
    # all details are zero, so the top band has no spread
    coeffs = forward(np.full(256, 2.0))
    assert plot_curves(coeffs, str(tmp_path)) == []


def test_plot_curves_with_infinite_sample(tmp_path):
    signal = np.random.default_rng(10).normal(size=512)
    signal[5] = np.inf
    coeffs = forward(signal)
    assert not np.all(np.isfinite(coeffs[256:]))
    assert plot_curves(coeffs, str(tmp_path)) == []
    assert os.listdir(tmp_path) == []


def test_plot_curves_with_nan_sample(tmp_path):
    signal = np.random.default_rng(12).normal(size=256)
    signal[200] = np.nan
    assert plot_curves(forward(signal), str(tmp_path)) == []
