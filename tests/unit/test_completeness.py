"""Unit tests for barracuda.domain.calculator.completeness."""

from barracuda.core.scoring_constants import CRITERIA_PRIORITIES, Priority
from barracuda.domain.calculator.completeness import analyze_criteria_completeness, criteria_values
from barracuda.domain.models import SearchCriteria


class TestCompleteness:
    def test_empty_profile(self):
        report = analyze_criteria_completeness(SearchCriteria())
        assert report.total_count == 14
        assert report.filled_count == 0
        assert report.completion_percentage == 0
        assert len(report.missing_fields) == 14

    def test_fields_keep_fixed_order(self):
        report = analyze_criteria_completeness(SearchCriteria())
        assert [f.name for f in report.fields] == list(CRITERIA_PRIORITIES)

    def test_full_profile(self):
        criteria = SearchCriteria(
            locations="Bergerac",
            min_budget=150000,
            property_types=["house"],
            max_surface=200,
            min_bedrooms=3,
            min_rooms=5,
            pool_preference="preferred",
            min_land_surface=1000,
            condition="Good",
            heating="Heat pump",
            min_year_built=1950,
            min_bathrooms=1,
            drainage="Mains",
            desired_dpe="C",
        )
        report = analyze_criteria_completeness(criteria)
        assert report.filled_count == 14
        assert report.completion_percentage == 100
        assert report.missing_fields == []

    def test_percentage_rounds_half_up(self):
        criteria = SearchCriteria(locations="Bergerac", max_budget=300000, property_types=["house"])
        # 3 / 14 = 21.4%
        assert analyze_criteria_completeness(criteria).completion_percentage == 21

    def test_half_filled(self):
        criteria = SearchCriteria(
            locations="Sarlat",
            min_budget=100000,
            property_types=["house"],
            min_surface=80,
            min_bedrooms=2,
            min_rooms=4,
            heating="Wood",
        )
        assert analyze_criteria_completeness(criteria).completion_percentage == 50

    def test_missing_sorted_by_priority(self):
        report = analyze_criteria_completeness(SearchCriteria(locations="Bergerac", desired_dpe="B"))
        names = [f.name for f in report.missing_fields]
        assert names == [
            "budget",
            "propertyTypes",
            "surface",
            "bedrooms",
            "rooms",
            "pool",
            "landSurface",
            "condition",
            "heating",
            "yearBuilt",
            "bathrooms",
            "drainage",
        ]
        assert report.missing_fields[0].priority == Priority.CRITICAL

    def test_custom_sector_needs_a_feature(self):
        empty = SearchCriteria(custom_sector={"type": "FeatureCollection", "features": []})
        drawn = SearchCriteria(custom_sector={"type": "FeatureCollection", "features": [{"type": "Feature"}]})
        assert analyze_criteria_completeness(empty).fields[0].filled is False
        assert analyze_criteria_completeness(drawn).fields[0].filled is True

    def test_blank_strings_are_not_filled(self):
        report = analyze_criteria_completeness(SearchCriteria(heating="  ", condition=""))
        assert report.filled_count == 0

    def test_zero_bathrooms_counts_as_filled(self):
        values = criteria_values(SearchCriteria(min_bathrooms=0))
        assert values["bathrooms"] == 0

    def test_range_value(self):
        values = criteria_values(SearchCriteria(min_surface=80))
        assert values["surface"] == {"min": 80, "max": None}
        assert values["budget"] is None
