"""Unit tests for the typed adapters and domain models."""

from datetime import date

import pytest
from pydantic import ValidationError

from barracuda.domain.models import (
    DPECandidate,
    MatchResult,
    ParcelDescriptor,
    PropertyListing,
    SaleRecord,
    ScoredMatch,
    SearchCriteria,
)
from barracuda.domain.models.criteria import parse_number_or_zero


class TestDPECandidateFromAdeme:
    def test_maps_upstream_labels(self, ademe_record):
        candidate = DPECandidate.from_ademe(ademe_record())

        assert candidate.certificate_number == "2424E0000001A"
        assert candidate.address == "12 rue des Fleurs"
        assert candidate.commune == "Bergerac"
        assert candidate.department == "24"
        assert candidate.postal_code == "24100"
        assert candidate.energy_class == "D"
        assert candidate.ghg_class == "C"
        assert candidate.consumption == pytest.approx(215.4)
        assert candidate.surface == 95.0
        assert candidate.establishment_date == date(2024, 3, 15)
        assert candidate.expiry_date == date(2034, 3, 14)
        assert candidate.annual_cost == pytest.approx(1830.5)
        assert candidate.construction_year == 1975
        assert candidate.building_type == "maison"

    def test_address_falls_back_to_ban(self, ademe_record):
        candidate = DPECandidate.from_ademe(ademe_record(Adresse_brute=""))
        assert candidate.address == "12 Rue des Fleurs 24100 Bergerac"

    def test_department_falls_back_to_postal_code(self, ademe_record):
        record = ademe_record(**{"N°_département_(BAN)": None})
        assert DPECandidate.from_ademe(record).department == "24"

    def test_unusable_values_become_none(self, ademe_record):
        record = ademe_record(
            Surface_habitable_logement="NC",
            **{"Date_établissement_DPE": "not a date", "Etiquette_DPE": " "},
        )
        candidate = DPECandidate.from_ademe(record)
        assert candidate.surface is None
        assert candidate.establishment_date is None
        assert candidate.energy_class is None

    def test_decimal_comma(self, ademe_record):
        candidate = DPECandidate.from_ademe(ademe_record(Surface_habitable_logement="82,5"))
        assert candidate.surface == 82.5

    def test_missing_certificate_number(self, ademe_record):
        with pytest.raises(ValidationError):
            DPECandidate.from_ademe(ademe_record(number=None))


class TestParcelFromIgn:
    def test_maps_feature(self):
        feature = {
            "properties": {
                "id": "24037000DM0316",
                "commune": "24037",
                "nom_com": "Bergerac",
                "section": "DM",
                "numero": "0316",
                "contenance": "1250",
            }
        }
        parcel = ParcelDescriptor.from_ign(feature, 0.48, 44.85)

        assert parcel.commune == "Bergerac"
        assert parcel.department == "24"
        assert parcel.area == 1250.0
        assert parcel.insee_code == "24037"
        assert parcel.coordinates.lon == 0.48

    def test_placeholders_are_dropped(self):
        feature = {"properties": {"id": "24037000DM0316", "section": "Unknown", "numero": "N/A"}}
        parcel = ParcelDescriptor.from_ign(feature, 0.48, 44.85)
        assert parcel.section is None
        assert parcel.numero is None

    def test_unparsable_area(self):
        parcel = ParcelDescriptor.from_ign({"properties": {"contenance": "?"}}, 0.48, 44.85)
        assert parcel.area == 0.0
        assert parcel.parcel_id is None
        assert parcel.department is None


class TestSaleRecord:
    def test_from_dvf(self):
        sale = SaleRecord.from_dvf({
            "idmutinvar": "abc",
            "datemut": "2019-11-05",
            "valeurfonc": "210000.00",
            "sbati": "0",
            "libtypbien": "UNE MAISON",
            "l_idpar": ["24037000DM0316"],
        })
        assert sale.date == date(2019, 11, 5)
        assert sale.price == 210000.0
        assert sale.parcel_ids == ["24037000DM0316"]
        # zero built surface counts as missing
        assert not sale.is_complete

    def test_missing_fields(self):
        sale = SaleRecord.from_dvf({})
        assert sale.date is None
        assert sale.parcel_ids == []


class TestListing:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("250 000 €", 250000.0),
            ("250 000", 250000.0),
            ("85,5", 85.5),
            (120, 120.0),
            ("Prix sur demande", 0.0),
            (None, 0.0),
        ],
    )
    def test_parse_or_zero(self, raw, expected):
        assert parse_number_or_zero(raw) == expected

    def test_extra_fields_are_kept(self):
        listing = PropertyListing(price="199 000", agency="Agence du Périgord")
        assert listing.price == 199000.0
        assert listing.surface == 0.0
        assert listing.model_extra["agency"] == "Agence du Périgord"

    def test_blank_attributes_are_unknown(self):
        listing = PropertyListing(heating="", rooms="")
        assert listing.heating is None
        assert listing.rooms is None


class TestSearchCriteria:
    def test_blank_strings_are_unset(self):
        criteria = SearchCriteria(heating=" ", locations="", pool_preference="")
        assert criteria.heating is None
        assert criteria.locations is None
        assert criteria.pool_preference is None

    def test_null_lists(self):
        criteria = SearchCriteria(property_types=None, selected_places=None)
        assert criteria.property_types == []
        assert not criteria.has_location

    def test_has_location(self):
        assert SearchCriteria(selected_places=[{"name": "Bergerac"}]).has_location
        assert SearchCriteria(radius_searches=[{"center": [0.48, 44.85], "radius": 10}]).has_location

    def test_negative_budget_rejected(self):
        with pytest.raises(ValidationError):
            SearchCriteria(min_budget=-1)


class TestMatchModels:
    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            ScoredMatch(id="x", confidence_score=101)

    def test_best_score(self):
        result = MatchResult(matches=[ScoredMatch(id="a", confidence_score=40), ScoredMatch(id="b", confidence_score=75)])
        assert result.best_score == 75
        assert MatchResult().best_score == 0
