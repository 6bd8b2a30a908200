"""Unit tests for barracuda.domain.calculator.quality."""

from datetime import date

import pytest

from barracuda.core.scoring_constants import QUALITY_WEIGHTS
from barracuda.domain.calculator.quality import (
    calculate_overall_quality,
    quality_level,
    quality_recommendations,
    score_address_quality,
    score_cadastral_quality,
    score_dpe_quality,
    score_sales_quality,
    weighted_average,
)
from barracuda.domain.models import (
    BuildingInfo,
    Coordinates,
    EnrichedParcel,
    MatchResult,
    ParcelDescriptor,
    QualityScore,
    SaleRecord,
    ScoredMatch,
    StandardizedAddress,
)


def _match(score, id_="M1"):
    return ScoredMatch(id=id_, confidence_score=score)


def _sale(sale_date, complete=True):
    return SaleRecord(
        mutation_id="mut",
        date=sale_date,
        price=185000 if complete else None,
        surface=110,
        type="Maison",
    )


@pytest.fixture
def full_address():
    return StandardizedAddress(
        address="12 Rue des Fleurs 24100 Bergerac",
        postal_code="24100",
        city="Bergerac",
        department="24",
        coordinates=Coordinates(lat=44.85, lon=0.48),
        confidence=0.9,
    )


class TestCadastralQuality:
    def test_complete_parcel_without_building(self, parcel):
        assert score_cadastral_quality(EnrichedParcel(parcel=parcel)) == 90

    def test_complete_parcel_with_building(self, parcel):
        data = EnrichedParcel(parcel=parcel, building=BuildingInfo(construction_year=1985, building_type="Maison"))
        assert score_cadastral_quality(data) == 100

    def test_identifier_only(self):
        data = EnrichedParcel(parcel=ParcelDescriptor(parcel_id="24037000DM0316"))
        assert score_cadastral_quality(data) == 20

    def test_placeholder_values_earn_nothing(self):
        data = EnrichedParcel(parcel=ParcelDescriptor(parcel_id="UNKNOWN", commune="Unknown", section="N/A"))
        assert score_cadastral_quality(data) == 0

    def test_building_without_attributes(self, parcel):
        data = EnrichedParcel(parcel=parcel, building=BuildingInfo())
        assert score_cadastral_quality(data) == 90


class TestAddressQuality:
    def test_full_standardized_address(self, parcel, full_address):
        assert score_address_quality(EnrichedParcel(parcel=parcel, address=full_address)) == 100

    def test_bare_standardized_address(self, parcel):
        address = StandardizedAddress(address="Lieu-dit Les Vignes")
        assert score_address_quality(EnrichedParcel(parcel=parcel, address=address)) == 50

    def test_fallback_commune_and_department(self, parcel):
        assert score_address_quality(EnrichedParcel(parcel=parcel)) == 50

    def test_fallback_commune_only(self):
        data = EnrichedParcel(parcel=ParcelDescriptor(commune="Bergerac"))
        assert score_address_quality(data) == 30

    def test_nothing_known(self):
        assert score_address_quality(EnrichedParcel(parcel=ParcelDescriptor())) == 0


class TestDPEQuality:
    def test_exact_match_passes_through(self):
        best = _match(95)
        result = MatchResult(matches=[best], exact_match=best, confidence=95)
        assert score_dpe_quality(result) == 95

    def test_best_candidate_is_penalized(self):
        result = MatchResult(matches=[_match(80)])
        assert score_dpe_quality(result) == 64

    def test_penalty_rounds_half_up(self):
        # 87 * 0.8 = 69.6
        result = MatchResult(matches=[_match(87)])
        assert score_dpe_quality(result) == 70

    def test_penalty_is_capped_at_80(self):
        result = MatchResult(matches=[_match(100)])
        assert score_dpe_quality(result) == 80

    def test_best_is_highest_listed(self):
        result = MatchResult(matches=[_match(55, "a"), _match(75, "b")])
        assert score_dpe_quality(result) == 60

    def test_no_result(self):
        assert score_dpe_quality(None) == 0
        assert score_dpe_quality(MatchResult()) == 0


class TestSalesQuality:
    def test_no_sales(self, now):
        assert score_sales_quality([], now) == 0
        assert score_sales_quality(None, now) == 0

    def test_single_recent_complete_sale(self, now):
        assert score_sales_quality([_sale(date(2023, 4, 12))], now) == 90

    def test_two_recent_complete_sales(self, now):
        sales = [_sale(date(2023, 4, 12)), _sale(date(2012, 9, 3))]
        assert score_sales_quality(sales, now) == 100

    def test_old_incomplete_sales(self, now):
        sales = [_sale(date(2015, 1, 1)), _sale(date(2010, 1, 1), complete=False)]
        assert score_sales_quality(sales, now) == 70

    def test_single_old_complete_sale(self, now):
        assert score_sales_quality([_sale(date(2001, 6, 1))], now) == 70

    def test_five_year_boundary_is_inclusive(self, now):
        assert score_sales_quality([_sale(date(2020, 6, 1))], now) == 90

    def test_leap_day_reference(self):
        assert score_sales_quality([_sale(date(2019, 2, 28))], date(2024, 2, 29)) == 90


class TestWeightedAverage:
    def test_default_weights(self):
        scores = {
            "cadastral_confidence": 100,
            "address_confidence": 100,
            "dpe_confidence": 64,
            "sales_confidence": 90,
        }
        assert weighted_average(scores, QUALITY_WEIGHTS) == pytest.approx(88.2)

    def test_unweighted_keys_are_ignored(self):
        scores = {"cadastral_confidence": 100, "unrelated": 0}
        assert weighted_average(scores, QUALITY_WEIGHTS) == pytest.approx(100)

    def test_key_order_does_not_matter(self):
        scores = {"cadastral_confidence": 70, "dpe_confidence": 30, "sales_confidence": 10}
        reordered = dict(reversed(list(scores.items())))
        assert weighted_average(scores, QUALITY_WEIGHTS) == pytest.approx(
            weighted_average(reordered, QUALITY_WEIGHTS)
        )

    def test_no_weighted_key(self):
        assert weighted_average({"other": 50}, QUALITY_WEIGHTS) == 0.0


class TestOverallQuality:
    def test_full_profile(self, parcel, full_address, now):
        data = EnrichedParcel(
            parcel=parcel,
            building=BuildingInfo(construction_year=1985, building_type="Maison"),
            address=full_address,
        )
        result = MatchResult(matches=[_match(80)])
        quality = calculate_overall_quality(data, result, [_sale(date(2023, 4, 12))], now=now)

        assert quality.sub_scores() == {
            "cadastral_confidence": 100,
            "address_confidence": 100,
            "dpe_confidence": 64,
            "sales_confidence": 90,
        }
        assert quality.overall == 88

    def test_nothing_known(self, now):
        quality = calculate_overall_quality(EnrichedParcel(parcel=ParcelDescriptor()), None, [], now=now)
        assert quality.overall == 0

    def test_custom_weights(self, parcel, now):
        weights = {
            "cadastral_confidence": 1.0,
            "address_confidence": 0.0,
            "dpe_confidence": 0.0,
            "sales_confidence": 0.0,
        }
        quality = calculate_overall_quality(EnrichedParcel(parcel=parcel), None, [], weights=weights, now=now)
        assert quality.overall == 90


class TestQualityLevel:
    @pytest.mark.parametrize(
        "score, level",
        [(100, "EXCELLENT"), (90, "EXCELLENT"), (89, "GOOD"), (70, "GOOD"), (50, "FAIR"), (49, "POOR"), (0, "POOR")],
    )
    def test_bands(self, score, level):
        assert quality_level(score).level == level

    def test_color(self):
        assert quality_level(95).color == "green"


class TestRecommendations:
    def test_all_good(self):
        scores = QualityScore(
            cadastral_confidence=90, address_confidence=85, dpe_confidence=95, sales_confidence=70, overall=90
        )
        assert quality_recommendations(scores) == []

    def test_weak_sources(self):
        scores = QualityScore(
            cadastral_confidence=60, address_confidence=50, dpe_confidence=0, sales_confidence=0, overall=36
        )
        recommendations = quality_recommendations(scores)
        assert len(recommendations) == 4
        assert recommendations[0] == "Verify cadastral parcel information"
