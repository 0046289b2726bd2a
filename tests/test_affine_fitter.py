#!/usr/bin/env python3
"""
Tests for the least-squares affine fitter.

Covers exact three-point fits, over-determined least-squares fits checked
against numpy's solver, residual bookkeeping, and rejection of collinear,
coincident and too-small point sets.

Run with: python -m pytest tests/test_affine_fitter.py -v
"""

import math
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from geosnap.affine_fitter import _det3, check_pixel_geometry, fit_affine, normal_matrix, solve_axis
from geosnap.control_points import ControlPoint, ControlPointSet
from geosnap.errors import DegenerateSystemError, GeoreferenceError, InsufficientPointsError
from geosnap.transformation import TransformationParams


def _points_from(params, pixels):
    points = []
    for i, (x, y) in enumerate(pixels):
        lng, lat = params.apply(x, y)
        points.append(ControlPoint(f"GCP-{i + 1}", float(x), float(y), lat=lat, lng=lng))
    return points


# ============================================================================
# Helpers
# ============================================================================


class TestDeterminant:
    def test_identity(self):
        assert _det3(((1, 0, 0), (0, 1, 0), (0, 0, 1))) == 1

    def test_matches_numpy(self):
        m = ((2.0, -1.0, 0.5), (3.0, 4.0, -2.0), (1.0, 0.0, 7.0))
        assert _det3(m) == pytest.approx(np.linalg.det(np.array(m)))

    def test_normal_matrix_entries(self):
        px = np.array([0.0, 100.0, 0.0])
        py = np.array([0.0, 0.0, 100.0])
        assert normal_matrix(px, py) == (
            (10000.0, 0.0, 100.0),
            (0.0, 10000.0, 100.0),
            (100.0, 100.0, 3.0),
        )


# ============================================================================
# Exact fits
# ============================================================================


class TestExactFit:
    """Three non-collinear points determine the affine map exactly."""

    def test_reference_three_point_example(self):
        """(0,0)->(-7,34), (100,0)->(-6.9,34), (0,100)->(-7,33.9)."""
        points = [
            ControlPoint("GCP-1", 0.0, 0.0, lat=34.0, lng=-7.0),
            ControlPoint("GCP-2", 100.0, 0.0, lat=34.0, lng=-6.9),
            ControlPoint("GCP-3", 0.0, 100.0, lat=33.9, lng=-7.0),
        ]
        params = fit_affine(points).params

        assert params.A == pytest.approx(0.001, abs=1e-12)
        assert params.B == pytest.approx(0.0, abs=1e-12)
        assert params.C == pytest.approx(-7.0, abs=1e-12)
        assert params.D == pytest.approx(0.0, abs=1e-12)
        assert params.E == pytest.approx(-0.001, abs=1e-12)
        assert params.F == pytest.approx(34.0, abs=1e-12)

    def test_rotated_sheared_map_is_recovered(self):
        truth = TransformationParams(
            A=0.0002, B=0.00001, C=-7.2, D=-0.00002, E=-0.00015, F=33.9
        )
        points = _points_from(truth, [(10, 20), (500, 40), (80, 700)])

        fit = fit_affine(points)

        assert fit.params.as_tuple() == pytest.approx(truth.as_tuple(), rel=1e-7, abs=1e-10)
        assert fit.rms_lng == pytest.approx(0.0, abs=1e-8)
        assert fit.rms_lat == pytest.approx(0.0, abs=1e-8)

    def test_four_point_rectangle_is_exact(self):
        """A rectangular calibration with known pixel size has zero residuals."""
        width, height = 2000, 1500
        points = [
            ControlPoint("NW", 0.0, 0.0, lat=34.0, lng=-7.5),
            ControlPoint("NE", 2000.0, 0.0, lat=34.0, lng=-7.0),
            ControlPoint("SE", 2000.0, 1500.0, lat=33.75, lng=-7.0),
            ControlPoint("SW", 0.0, 1500.0, lat=33.75, lng=-7.5),
        ]

        fit = fit_affine(points)

        assert fit.params.A == pytest.approx(0.5 / width, rel=1e-7)
        assert fit.params.E == pytest.approx(-0.25 / height, rel=1e-7)
        assert fit.params.B == pytest.approx(0.0, abs=1e-10)
        assert fit.params.D == pytest.approx(0.0, abs=1e-10)
        assert max(abs(r) for pair in fit.residuals for r in pair) < 1e-8

    def test_accepts_control_point_set(self):
        point_set = ControlPointSet.create(
            [
                ControlPoint("GCP-1", 0.0, 0.0, lat=34.0, lng=-7.0),
                ControlPoint("GCP-2", 100.0, 0.0, lat=34.0, lng=-6.9),
                ControlPoint("GCP-3", 0.0, 100.0, lat=33.9, lng=-7.0),
            ],
            100,
            100,
        )
        assert fit_affine(point_set).params.A == pytest.approx(0.001)


# ============================================================================
# Least squares
# ============================================================================


class TestLeastSquaresFit:
    """Four or more points give the ordinary least-squares solution."""

    @pytest.fixture
    def noisy_points(self):
        rng = np.random.default_rng(42)
        truth = TransformationParams(
            A=0.00025, B=0.00002, C=-7.5, D=-0.00001, E=-0.00017, F=34.0
        )
        pixels = np.column_stack([rng.uniform(0, 2000, 12), rng.uniform(0, 1500, 12)])
        points = []
        for i, (x, y) in enumerate(pixels):
            lng, lat = truth.apply(x, y)
            points.append(
                ControlPoint(
                    f"GCP-{i + 1}",
                    float(x),
                    float(y),
                    lat=lat + rng.normal(0, 1e-4),
                    lng=lng + rng.normal(0, 1e-4),
                )
            )
        return points

    def test_matches_numpy_lstsq(self, noisy_points):
        design = np.array([[p.pixel_x, p.pixel_y, 1.0] for p in noisy_points])
        lngs = np.array([p.lng for p in noisy_points])
        lats = np.array([p.lat for p in noisy_points])
        expected_lng, *_ = np.linalg.lstsq(design, lngs, rcond=None)
        expected_lat, *_ = np.linalg.lstsq(design, lats, rcond=None)

        params = fit_affine(noisy_points).params

        assert (params.A, params.B, params.C) == pytest.approx(tuple(expected_lng), rel=1e-6, abs=1e-7)
        assert (params.D, params.E, params.F) == pytest.approx(tuple(expected_lat), rel=1e-6, abs=1e-7)

    def test_residuals_are_observed_minus_predicted(self, noisy_points):
        fit = fit_affine(noisy_points)

        assert len(fit.residuals) == len(noisy_points)
        for point, (res_lng, res_lat) in zip(noisy_points, fit.residuals):
            lng, lat = fit.params.apply(point.pixel_x, point.pixel_y)
            assert res_lng == pytest.approx(point.lng - lng, abs=1e-12)
            assert res_lat == pytest.approx(point.lat - lat, abs=1e-12)

    def test_residuals_sum_to_zero_with_intercept(self, noisy_points):
        fit = fit_affine(noisy_points)
        assert sum(r[0] for r in fit.residuals) == pytest.approx(0.0, abs=1e-6)
        assert sum(r[1] for r in fit.residuals) == pytest.approx(0.0, abs=1e-6)

    def test_rms_matches_residuals(self, noisy_points):
        fit = fit_affine(noisy_points)
        expected_rms_lat = math.sqrt(sum(r[1] ** 2 for r in fit.residuals) / len(fit.residuals))
        assert fit.rms_lat == pytest.approx(expected_rms_lat)
        assert 0.0 < fit.rms_lng < 1e-3

    def test_single_outlier_shows_in_its_residual(self):
        points = [
            ControlPoint("GCP-1", 0.0, 0.0, lat=34.0, lng=-7.0),
            ControlPoint("GCP-2", 100.0, 0.0, lat=34.0, lng=-6.9),
            ControlPoint("GCP-3", 0.0, 100.0, lat=33.9, lng=-7.0),
            ControlPoint("GCP-4", 100.0, 100.0, lat=33.9, lng=-6.9 + 0.004),
        ]
        fit = fit_affine(points)
        assert fit.rms_lat == pytest.approx(0.0, abs=1e-12)
        assert fit.residuals[3][0] > 0
        assert fit.rms_lng == pytest.approx(0.001, rel=1e-9)


# ============================================================================
# Failures
# ============================================================================


class TestFitFailures:
    """Failures raise; the fitter never returns placeholder coefficients."""

    @pytest.mark.parametrize("count", [0, 1], ids=["empty", "single"])
    def test_too_few_points(self, count):
        points = [ControlPoint("GCP-1", 0.0, 0.0, lat=34.0, lng=-7.0)][:count]
        with pytest.raises(InsufficientPointsError, match=f"got {count}"):
            fit_affine(points)

    @pytest.mark.parametrize(
        "pixels",
        [
            [(0, 0), (100, 0)],
            [(10, 20), (30, 50)],
            [(0, 0), (50, 50), (100, 100)],
            [(10, 10), (10, 10), (10, 10)],
            [(0, 0), (0, 0), (100, 0)],
        ],
        ids=["two-points-horizontal", "two-points-oblique", "collinear", "coincident", "duplicate-on-line"],
    )
    def test_degenerate_pixel_geometry(self, pixels):
        points = [
            ControlPoint(f"GCP-{i + 1}", float(x), float(y), lat=34.0 - 0.01 * i, lng=-7.0 + 0.01 * i)
            for i, (x, y) in enumerate(pixels)
        ]
        with pytest.raises(DegenerateSystemError, match="collinear or coincident"):
            fit_affine(points)

    @pytest.mark.parametrize(
        "pixels",
        [
            [(12.3, 45.6), (789.1, 234.5)],
            [(10.5, 21.0), (310.75, 621.5), (1211.5, 2423.0)],
            [(12.3, 45.6), (400.7, 140.05), (789.1, 234.5)],
            [(10.5, 20.25), (310.75, 620.5), (1211.5, 2421.0)],
            [(0.1, 1234.7), (0.1, 1234.7), (0.1, 1234.7)],
            [(100.3, 10.1), (100.3, 520.9), (100.3, 1999.7)],
        ],
        ids=[
            "two-points-fractional",
            "collinear-fractional",
            "collinear-midpoint",
            "subpixel-thin-triangle",
            "coincident-fractional",
            "vertical-line-fractional",
        ],
    )
    def test_degenerate_fractional_pixel_geometry(self, pixels):
        points = [
            ControlPoint(f"GCP-{i + 1}", x, y, lat=34.0 - 0.01 * i, lng=-7.0 + 0.013 * i)
            for i, (x, y) in enumerate(pixels)
        ]
        with pytest.raises(DegenerateSystemError, match="collinear or coincident"):
            fit_affine(points)

    def test_geometry_check_ignores_grid_offset(self):
        # A well-spread triangle far from the pixel origin is still fitted
        points = [
            ControlPoint("GCP-1", 5000.25, 8000.5, lat=34.0, lng=-7.0),
            ControlPoint("GCP-2", 5100.25, 8000.5, lat=34.0, lng=-6.9),
            ControlPoint("GCP-3", 5000.25, 8100.5, lat=33.9, lng=-7.0),
        ]
        fit = fit_affine(points)
        assert fit.params.A == pytest.approx(0.001, rel=1e-4)
        assert fit.params.E == pytest.approx(-0.001, rel=1e-4)

    def test_check_pixel_geometry_accepts_thin_strip(self):
        px = np.array([0.0, 10000.0, 0.0, 10000.0])
        py = np.array([0.0, 0.0, 100.0, 100.0])
        check_pixel_geometry(px, py)

    def test_failures_share_a_base_class(self):
        for error in (InsufficientPointsError, DegenerateSystemError):
            assert issubclass(error, GeoreferenceError)
            assert issubclass(error, ValueError)

    def test_solve_axis_reports_axis_name(self):
        px = np.array([0.0, 50.0, 100.0])
        with pytest.raises(DegenerateSystemError, match="latitude"):
            solve_axis(np.array([1.0, 2.0, 3.0]), px, px, axis_name="latitude")
