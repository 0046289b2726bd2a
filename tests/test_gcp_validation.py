#!/usr/bin/env python3
"""
Unit tests for GCP (Ground Control Point) validation functions.

Tests verify validation logic for geographic coordinates, pixel coordinates
against raster bounds, raster dimensions, duplicate detection, and overall
GCP record lists.
"""

import math
import os
import sys
import unittest

# Add parent directory to path to import modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import numpy as np

from geosnap.errors import ControlPointValidationError
from geosnap.gcp_validation import (
    MAX_GCP_COUNT,
    MAX_RASTER_DIMENSION,
    _is_valid_finite_number,
    detect_duplicate_gcps,
    validate_control_point_records,
    validate_gcp_geographic_coordinates,
    validate_gcp_pixel_coordinates,
    validate_raster_dimension,
)


def _gcp(px=10.0, py=20.0, lat=33.8, lng=-7.25, **extra):
    record = {"pixelX": px, "pixelY": py, "lat": lat, "lng": lng}
    record.update(extra)
    return record


class TestIsValidFiniteNumber(unittest.TestCase):
    """Test the finite number predicate."""

    def test_ints_and_floats_are_valid(self):
        self.assertTrue(_is_valid_finite_number(0))
        self.assertTrue(_is_valid_finite_number(-7.25))
        self.assertTrue(_is_valid_finite_number(np.float64(1.5)))

    def test_nan_and_infinity_are_invalid(self):
        self.assertFalse(_is_valid_finite_number(float("nan")))
        self.assertFalse(_is_valid_finite_number(math.inf))
        self.assertFalse(_is_valid_finite_number(-math.inf))

    def test_booleans_are_invalid(self):
        """Test that booleans are rejected even though they are ints."""
        self.assertFalse(_is_valid_finite_number(True))
        self.assertFalse(_is_valid_finite_number(False))

    def test_strings_and_none_are_invalid(self):
        self.assertFalse(_is_valid_finite_number("12.5"))
        self.assertFalse(_is_valid_finite_number(None))
        self.assertFalse(_is_valid_finite_number(1 + 2j))


class TestValidateGCPGeographicCoordinates(unittest.TestCase):
    """Test geographic coordinate validation for ground control points."""

    def test_valid_latitude_longitude_pass_validation(self):
        """Test that valid latitude and longitude pass validation."""
        # Should not raise any exception
        validate_gcp_geographic_coordinates(_gcp(), 0)

    def test_latitude_below_min_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "lat -91.0 degrees outside"):
            validate_gcp_geographic_coordinates(_gcp(lat=-91.0), 0)

    def test_latitude_above_max_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "lat 91.0 degrees outside"):
            validate_gcp_geographic_coordinates(_gcp(lat=91.0), 0)

    def test_longitude_out_of_range_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "lng 181.0 degrees outside"):
            validate_gcp_geographic_coordinates(_gcp(lng=181.0), 0)

    def test_coordinates_at_boundaries_pass(self):
        """Test that coordinates exactly at the limits pass validation."""
        validate_gcp_geographic_coordinates(_gcp(lat=-90.0, lng=-180.0), 0)
        validate_gcp_geographic_coordinates(_gcp(lat=90.0, lng=180.0), 1)

    def test_missing_latitude_field_raises(self):
        gcp = _gcp()
        del gcp["lat"]
        with self.assertRaisesRegex(ControlPointValidationError, "missing required 'lat'"):
            validate_gcp_geographic_coordinates(gcp, 0)

    def test_nan_latitude_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "must be a finite number"):
            validate_gcp_geographic_coordinates(_gcp(lat=float("nan")), 0)

    def test_string_longitude_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "lng must be a number, got str"):
            validate_gcp_geographic_coordinates(_gcp(lng="-7.25"), 0)

    def test_error_message_includes_description(self):
        """Test that error messages name the GCP by id."""
        with self.assertRaisesRegex(ControlPointValidationError, "GCP at GCP-7"):
            validate_gcp_geographic_coordinates(_gcp(lat=95.0, id="GCP-7"), 6)

    def test_error_message_falls_back_to_index(self):
        with self.assertRaisesRegex(ControlPointValidationError, "GCP at index 3"):
            validate_gcp_geographic_coordinates(_gcp(lat=95.0), 3)

    def test_errors_are_value_errors(self):
        """Test that validation errors can be caught as ValueError."""
        with self.assertRaises(ValueError):
            validate_gcp_geographic_coordinates(_gcp(lat=95.0), 0)


class TestValidateGCPPixelCoordinates(unittest.TestCase):
    """Test pixel coordinate validation for ground control points."""

    def test_valid_pixel_coordinates_with_dimensions_pass(self):
        validate_gcp_pixel_coordinates(_gcp(px=100, py=200), 0, 2000, 1500)

    def test_validation_passes_when_dimensions_not_provided(self):
        """Test that bounds are not checked without raster dimensions."""
        validate_gcp_pixel_coordinates(_gcp(px=99999, py=-5), 0)

    def test_validation_passes_at_boundaries(self):
        """Test that pixel positions on the raster edges are valid."""
        validate_gcp_pixel_coordinates(_gcp(px=0, py=0), 0, 2000, 1500)
        validate_gcp_pixel_coordinates(_gcp(px=2000, py=1500), 1, 2000, 1500)

    def test_x_outside_raster_width_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "pixelX 2000.5 pixels outside"):
            validate_gcp_pixel_coordinates(_gcp(px=2000.5), 0, 2000, 1500)

    def test_negative_y_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "pixelY -1 pixels outside"):
            validate_gcp_pixel_coordinates(_gcp(py=-1), 0, 2000, 1500)

    def test_missing_pixel_field_raises(self):
        gcp = _gcp()
        del gcp["pixelY"]
        with self.assertRaisesRegex(ControlPointValidationError, "missing required 'pixelY'"):
            validate_gcp_pixel_coordinates(gcp, 0, 2000, 1500)

    def test_infinite_pixel_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "must be a finite number"):
            validate_gcp_pixel_coordinates(_gcp(px=math.inf), 0)

    def test_boolean_pixel_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "must be a number, got bool"):
            validate_gcp_pixel_coordinates(_gcp(px=True), 0, 2000, 1500)


class TestValidateRasterDimension(unittest.TestCase):
    """Test raster width/height validation."""

    def test_positive_integer_passes(self):
        self.assertEqual(validate_raster_dimension(2000, "width"), 2000)

    def test_whole_float_is_normalized_to_int(self):
        result = validate_raster_dimension(1500.0, "height")
        self.assertEqual(result, 1500)
        self.assertIsInstance(result, int)

    def test_fractional_dimension_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "whole number"):
            validate_raster_dimension(1500.5, "height")

    def test_zero_and_negative_raise(self):
        for value in (0, -10):
            with self.subTest(value=value):
                with self.assertRaisesRegex(ControlPointValidationError, "must be positive"):
                    validate_raster_dimension(value, "width")

    def test_too_large_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "exceeds maximum"):
            validate_raster_dimension(MAX_RASTER_DIMENSION + 1, "width")

    def test_non_numeric_raises(self):
        for value in ("2000", None, float("nan"), True):
            with self.subTest(value=value):
                with self.assertRaises(ControlPointValidationError):
                    validate_raster_dimension(value, "width")


class TestDetectDuplicateGCPs(unittest.TestCase):
    """Test duplicate GCP detection."""

    def test_no_duplicates_passes(self):
        detect_duplicate_gcps([_gcp(px=0, py=0), _gcp(px=100, py=0, lng=-7.0)])

    def test_duplicate_geographic_and_pixel_raises(self):
        gcps = [_gcp(id="GCP-1"), _gcp(id="GCP-2")]
        with self.assertRaisesRegex(ControlPointValidationError, "Duplicate GCP detected at GCP-1 and GCP-2"):
            detect_duplicate_gcps(gcps)

    def test_same_geographic_different_pixels_does_not_raise(self):
        detect_duplicate_gcps([_gcp(px=10), _gcp(px=500)])

    def test_same_pixels_different_geographic_does_not_raise(self):
        """Test that shared pixel positions are left for the fitter to reject."""
        detect_duplicate_gcps([_gcp(lat=33.8), _gcp(lat=33.9)])

    def test_near_duplicate_within_epsilon_raises(self):
        gcps = [_gcp(), _gcp(px=10.0 + 1e-8, lat=33.8 + 1e-11)]
        with self.assertRaises(ControlPointValidationError):
            detect_duplicate_gcps(gcps)

    def test_custom_epsilon_values(self):
        gcps = [_gcp(), _gcp(px=10.5, lat=33.8005)]
        detect_duplicate_gcps(gcps)
        with self.assertRaises(ControlPointValidationError):
            detect_duplicate_gcps(gcps, gps_epsilon=0.001, pixel_epsilon=1.0)

    def test_empty_and_single_lists_pass(self):
        detect_duplicate_gcps([])
        detect_duplicate_gcps([_gcp()])


class TestValidateControlPointRecords(unittest.TestCase):
    """Test validation of full GCP record lists."""

    def test_valid_list_is_returned(self):
        gcps = [_gcp(px=0, py=0), _gcp(px=100, py=0), _gcp(px=0, py=100)]
        self.assertIs(validate_control_point_records(gcps, 200, 200), gcps)

    def test_non_list_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "must be a list, got dict"):
            validate_control_point_records({"controlPoints": []})

    def test_non_dict_item_raises(self):
        with self.assertRaisesRegex(ControlPointValidationError, "index 1 must be a dictionary"):
            validate_control_point_records([_gcp(), [1, 2, 3, 4]])

    def test_too_many_gcps_raises(self):
        gcps = [_gcp(px=float(i)) for i in range(MAX_GCP_COUNT + 1)]
        with self.assertRaisesRegex(ControlPointValidationError, "Too many GCPs"):
            validate_control_point_records(gcps)

    def test_fewer_than_min_gcp_count_logs_warning(self):
        with self.assertLogs("geosnap.gcp_validation", level="WARNING") as captured:
            validate_control_point_records([_gcp()])
        self.assertIn("Only 1 GCPs provided", captured.output[0])

    def test_raster_dimensions_used_for_bounds_checking(self):
        with self.assertRaisesRegex(ControlPointValidationError, "pixelX"):
            validate_control_point_records([_gcp(px=300)], raster_width=200, raster_height=200)

    def test_nested_duplicate_errors_are_raised(self):
        with self.assertRaisesRegex(ControlPointValidationError, "Duplicate GCP"):
            validate_control_point_records([_gcp(), _gcp(), _gcp(px=50)])


if __name__ == "__main__":
    unittest.main()
