import math

import pytest

from neoimpact.core.geo import (
    GeoPoint,
    get_bounds_for_radius,
    get_zoom_for_radius,
    haversine_distance_km,
    km_to_pixels,
    lat_lng_to_pixel,
    meters_per_pixel,
    miles_to_pixels,
)

NYC = GeoPoint(lat=40.7128, lng=-74.006)
LA = GeoPoint(lat=34.0522, lng=-118.2437)


def test_haversine_zero_for_same_point():
    for p in [NYC, LA, GeoPoint(0, 0), GeoPoint(-33.9, 151.2)]:
        assert haversine_distance_km(p, p) == 0


def test_haversine_is_symmetric_and_realistic():
    ab = haversine_distance_km(NYC, LA)
    ba = haversine_distance_km(LA, NYC)
    assert ab == pytest.approx(ba)
    assert ab == pytest.approx(3936, rel=0.005)


def test_haversine_quarter_meridian():
    d = haversine_distance_km(GeoPoint(0, 0), GeoPoint(90, 0))
    assert d == pytest.approx(6371 * math.pi / 2)


def test_meters_per_pixel_matches_web_mercator_formula():
    assert meters_per_pixel(0, 0) == pytest.approx(156543.03392)
    assert meters_per_pixel(0, 1) == pytest.approx(156543.03392 / 2)
    assert meters_per_pixel(60, 0) == pytest.approx(156543.03392 * 0.5)


def test_meters_per_pixel_decreases_with_zoom():
    values = [meters_per_pixel(40.0, z) for z in range(0, 21)]
    assert all(a > b for a, b in zip(values, values[1:]))


def test_km_to_pixels_zero_distance():
    for lat in (-80, -10, 0, 45.5, 80):
        for zoom in (0, 5, 12, 20):
            assert km_to_pixels(0, lat, zoom) == 0


def test_miles_to_pixels_matches_km_conversion():
    for miles, lat, zoom in [(1, 0, 10), (12.5, 40.7, 7), (300, -33.0, 3)]:
        assert miles_to_pixels(miles, lat, zoom) == pytest.approx(km_to_pixels(miles * 1.60934, lat, zoom))


def test_pixels_blow_up_at_the_pole_instead_of_raising():
    assert km_to_pixels(1, 90, 0) > 1e10


def test_zoom_for_radius_scenario_matches_closed_form():
    zoom = get_zoom_for_radius(500, 0, 800)
    assert zoom == 6

    radius_px = 500 * 1000 / (156543.03392 * math.cos(0) / 2**zoom)
    assert radius_px * 2.5 <= 800
    next_px = 500 * 1000 / (156543.03392 / 2 ** (zoom + 1))
    assert next_px * 2.5 > 800


def test_zoom_for_radius_is_monotonic_in_container_width():
    for radius_km, lat in [(0.5, 10), (25, 45), (500, 0), (3000, -60)]:
        zooms = [get_zoom_for_radius(radius_km, lat, w) for w in range(50, 4001, 50)]
        assert zooms == sorted(zooms)


def test_zoom_for_radius_saturates():
    assert get_zoom_for_radius(1_000_000, 0, 100) == 0
    assert get_zoom_for_radius(0, 0, 800) == 20


def test_bounds_for_radius_new_york():
    b = get_bounds_for_radius(NYC, 100)
    assert b.north == pytest.approx(41.612, abs=1e-3)
    assert b.south == pytest.approx(39.814, abs=1e-3)
    lat_delta = b.north - NYC.lat
    lng_delta = b.east - NYC.lng
    assert lng_delta > lat_delta
    assert NYC.lng - b.west == pytest.approx(lng_delta)


def test_bounds_north_above_south_for_positive_radius():
    b = get_bounds_for_radius(GeoPoint(-12.0, 130.0), 0.1)
    assert b.north > b.south
    assert b.east > b.west


def test_lat_lng_to_pixel_center_maps_to_viewport_middle():
    p = lat_lng_to_pixel(NYC, 8, 800, 600, NYC)
    assert p.x == pytest.approx(400)
    assert p.y == pytest.approx(300)


def test_lat_lng_to_pixel_offsets():
    # At zoom 0 the world is 256px wide: 180 degrees east is half a world to the right.
    p = lat_lng_to_pixel(GeoPoint(0, 180), 0, 256, 256, GeoPoint(0, 0))
    assert p.x == pytest.approx(256)
    assert p.y == pytest.approx(128)

    north = lat_lng_to_pixel(GeoPoint(10, 0), 3, 500, 500, GeoPoint(0, 0))
    assert north.y < 250
    assert north.x == pytest.approx(250)


def test_lat_lng_to_pixel_south_pole_is_degenerate_not_an_error():
    p = lat_lng_to_pixel(GeoPoint(-90, 0), 0, 256, 256, GeoPoint(0, 0))
    assert math.isinf(p.y) or p.y > 1000
