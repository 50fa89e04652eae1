"""Unit tests for location resolution.

Pure function tests - no mocks needed.
"""

from quake_notifier.core.geocode import (
    UNKNOWN_LOCATION,
    GeoLocation,
    is_city_result,
    resolve_location,
    unknown_location,
)


class TestResolveLocation:
    """Tests for resolve_location() function."""

    def test_all_fields(self):
        """Display is the finest field; all fields become candidates."""
        response = {
            "locality": "Kadıköy",
            "city": "İstanbul",
            "principalSubdivision": "İstanbul",
        }

        result = resolve_location(response)

        assert result.display == "Kadıköy"
        assert result.candidates == ("kadikoy", "istanbul")

    def test_falls_back_to_city(self):
        """Empty locality falls back to city for display."""
        result = resolve_location({"locality": "", "city": "Çanakkale"})

        assert result.display == "Çanakkale"
        assert result.candidates == ("canakkale",)

    def test_falls_back_to_subdivision(self):
        """Only the subdivision is available."""
        result = resolve_location({"principalSubdivision": "Muğla"})

        assert result.display == "Muğla"
        assert result.candidates == ("mugla",)

    def test_nothing_resolved(self):
        """Empty response yields no display and no candidates."""
        result = resolve_location({})

        assert result.display is None
        assert result.candidates == ()
        assert result.display_name == UNKNOWN_LOCATION

    def test_ignores_non_string_fields(self):
        """Non-string values are ignored."""
        result = resolve_location({"locality": None, "city": 42, "principalSubdivision": "Van"})
        assert result.candidates == ("van",)

    def test_candidate_matches_normalized_subscription(self):
        """A stored 'istanbul' subscription matches a geocoded 'İstanbul'."""
        result = resolve_location({"city": "İstanbul"})
        assert "istanbul" in result.candidates


class TestUnknownLocation:
    """Tests for unknown_location() function."""

    def test_unknown(self):
        """Failure location displays 'Unknown' and matches nobody."""
        location = unknown_location()

        assert location == GeoLocation()
        assert location.display_name == "Unknown"
        assert location.candidates == ()


class TestIsCityResult:
    """Tests for is_city_result() function."""

    def test_city_present(self):
        """Any city classification validates the name."""
        results = [{"addresstype": "province"}, {"addresstype": "city"}]
        assert is_city_result(results) is True

    def test_no_city(self):
        """Only non-city matches fail validation."""
        assert is_city_result([{"addresstype": "village"}]) is False

    def test_empty(self):
        """No results fail validation."""
        assert is_city_result([]) is False
