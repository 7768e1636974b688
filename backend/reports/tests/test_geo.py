"""
Tests for the distance and bounding-box helpers in ``reports.geo``.
"""

import pytest

from reports.geo import bounding_box, haversine_m, longitude_ranges


def test_haversine_one_degree_of_latitude():
    assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)


def test_haversine_is_short_across_the_antimeridian():
    assert haversine_m(-17.0, 179.9998, -17.0, -179.9998) < 50


def test_box_inside_the_dateline_is_one_range():
    _, _, min_lon, max_lon = bounding_box(14.5995, 120.9842, 100)

    assert longitude_ranges(min_lon, max_lon) == [(min_lon, max_lon)]


def test_box_past_positive_180_wraps():
    _, _, min_lon, max_lon = bounding_box(-17.0, 179.9998, 100)

    (east_low, east_high), (west_low, west_high) = longitude_ranges(min_lon, max_lon)
    assert east_low == min_lon
    assert east_high == 180.0
    assert west_low == -180.0
    assert west_high == pytest.approx(max_lon - 360.0)
    assert west_high > -180.0


def test_box_past_negative_180_wraps():
    _, _, min_lon, max_lon = bounding_box(-17.0, -179.9998, 100)

    (east_low, east_high), (west_low, west_high) = longitude_ranges(min_lon, max_lon)
    assert east_low == pytest.approx(min_lon + 360.0)
    assert east_high == 180.0
    assert (west_low, west_high) == (-180.0, max_lon)


def test_box_near_the_pole_covers_every_longitude():
    _, _, min_lon, max_lon = bounding_box(89.9999, 10.0, 100)

    assert longitude_ranges(min_lon, max_lon) == [(-180.0, 180.0)]
