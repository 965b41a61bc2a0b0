import pytest
from pydantic import ValidationError as PydanticValidationError

from natureestate.core.config import Settings
from natureestate.core.errors import ValidationError
from natureestate.models.property import PropertyStatus, PropertyType
from natureestate.models.search import SortBy, SortOrder
from natureestate.modules.search.filter_normalizer import find_inverted_ranges, normalize_property_filter


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite:///:memory:", DEFAULT_PAGE_SIZE=20)


@pytest.fixture
def reject_settings():
    return Settings(DATABASE_URL="sqlite:///:memory:", INVERTED_RANGE_POLICY="reject")


class TestDefaults:
    """Defaults fill absent fields only"""

    def test_empty_input_gets_defaults(self, settings):
        criteria = normalize_property_filter({}, settings)
        assert criteria.status == PropertyStatus.ACTIVE
        assert criteria.limit == 20
        assert criteria.offset == 0
        assert criteria.sort_by == SortBy.CREATED_AT
        assert criteria.sort_order == SortOrder.DESC
        assert criteria.country is None
        assert criteria.price_min is None

    def test_default_limit_follows_settings(self):
        settings = Settings(DATABASE_URL="sqlite:///:memory:", DEFAULT_PAGE_SIZE=7)
        assert normalize_property_filter({}, settings).limit == 7

    def test_explicit_falsy_values_are_kept(self, settings):
        criteria = normalize_property_filter(
            {"offset": "0", "is_featured": "false", "bedrooms_min": "0", "price_min": "0"},
            settings,
        )
        assert criteria.offset == 0
        assert criteria.is_featured is False
        assert criteria.bedrooms_min == 0
        assert criteria.price_min == 0

    def test_explicit_status_overrides_default(self, settings):
        criteria = normalize_property_filter({"status": "sold"}, settings)
        assert criteria.status == PropertyStatus.SOLD


class TestCoercion:
    """String query values coerce to typed fields"""

    def test_numeric_strings_are_coerced(self, settings):
        criteria = normalize_property_filter(
            {"price_min": "300000", "price_max": "500000.5", "bedrooms_min": "3", "limit": "5"},
            settings,
        )
        assert criteria.price_min == 300000
        assert criteria.price_max == 500000.5
        assert criteria.bedrooms_min == 3
        assert criteria.limit == 5

    def test_enums_match_exactly(self, settings):
        criteria = normalize_property_filter(
            {"property_type": "cabin", "sort_by": "price", "sort_order": "asc"},
            settings,
        )
        assert criteria.property_type == PropertyType.CABIN
        assert criteria.sort_by == SortBy.PRICE
        assert criteria.sort_order == SortOrder.ASC

    def test_enum_match_is_case_sensitive(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter({"property_type": "Cabin"}, settings)
        assert exc_info.value.fields == ["property_type"]

    def test_unknown_parameters_are_ignored(self, settings):
        criteria = normalize_property_filter({"utm_source": "newsletter", "country": "Chile"}, settings)
        assert criteria.country == "Chile"

    def test_filter_is_immutable(self, settings):
        criteria = normalize_property_filter({"country": "Chile"}, settings)
        with pytest.raises(PydanticValidationError):
            criteria.country = "Peru"


class TestValidationErrors:
    """Every offending field is reported, not just the first"""

    def test_bad_number_is_an_error_not_dropped(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter({"price_min": "cheap"}, settings)
        assert exc_info.value.fields == ["price_min"]

    def test_all_invalid_fields_are_listed(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter(
                {
                    "limit": "0",
                    "offset": "-1",
                    "sort_by": "bedrooms",
                    "sort_order": "DESC",
                    "status": "archived",
                    "bedrooms_min": "two",
                },
                settings,
            )
        assert sorted(exc_info.value.fields) == [
            "bedrooms_min", "limit", "offset", "sort_by", "sort_order", "status",
        ]

    def test_offset_beyond_storage_range(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter({"offset": str(10**20)}, settings)
        assert exc_info.value.fields == ["offset"]

    def test_oversized_integers_are_listed(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter(
                {
                    "limit": str(2**63),
                    "bedrooms_min": "100000",
                    "bathrooms_min": str(10**30),
                    "year_built_min": "-5",
                    "year_built_max": "20000",
                },
                settings,
            )
        assert sorted(exc_info.value.fields) == [
            "bathrooms_min", "bedrooms_min", "limit", "year_built_max", "year_built_min",
        ]

    def test_largest_storable_offset_is_accepted(self, settings):
        assert normalize_property_filter({"offset": str(2**63 - 1)}, settings).offset == 2**63 - 1

    def test_empty_text_parameter_is_rejected(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter({"country": ""}, settings)
        assert exc_info.value.fields == ["country"]

    def test_payload_shape(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter({"limit": "-5"}, settings)
        payload = exc_info.value.to_payload()
        assert payload["success"] is False
        assert payload["errors"][0]["field"] == "limit"
        assert payload["errors"][0]["message"]


class TestInvertedRanges:
    """price_min > price_max and friends"""

    def test_empty_policy_accepts_inverted_range(self, settings):
        criteria = normalize_property_filter({"price_min": "500000", "price_max": "100000"}, settings)
        assert criteria.price_min == 500000
        assert criteria.price_max == 100000

    def test_reject_policy_names_every_inverted_pair(self, reject_settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter(
                {
                    "price_min": "500000",
                    "price_max": "100000",
                    "land_size_min": "10",
                    "land_size_max": "2",
                    "square_footage_min": "1000",
                    "square_footage_max": "2000",
                },
                reject_settings,
            )
        assert sorted(exc_info.value.fields) == ["land_size_min", "price_min"]

    def test_reject_policy_combines_with_field_errors(self, reject_settings):
        with pytest.raises(ValidationError) as exc_info:
            normalize_property_filter(
                {"limit": "0", "year_built_min": "2000", "year_built_max": "1990"},
                reject_settings,
            )
        assert sorted(exc_info.value.fields) == ["limit", "year_built_min"]

    def test_equal_bounds_are_not_inverted(self, reject_settings):
        criteria = normalize_property_filter({"price_min": "100", "price_max": "100"}, reject_settings)
        assert criteria.price_min == criteria.price_max == 100

    def test_find_inverted_ranges_skips_invalid_fields(self):
        errors = find_inverted_ranges({"price_min": "9", "price_max": "1"}, skip=frozenset({"price_max"}))
        assert errors == []
