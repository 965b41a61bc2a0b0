import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from natureestate.core.errors import StorageError
from natureestate.db.models import PropertyPhoto
from natureestate.modules.search.service import SearchService


# Each reference matcher mirrors one filter field's predicate
def _contains(value, needle):
    return value is not None and needle.lower() in value.lower()


def _at_least(value, bound):
    return value is not None and value >= bound


def _at_most(value, bound):
    return value is not None and value <= bound


SAMPLE_FILTER = {
    "query": ("river", lambda p, v: _contains(p.get("title"), v) or _contains(p.get("description"), v)),
    "location_text": ("algarve", lambda p, v: any(
        _contains(p.get(column), v) for column in ("country", "region", "city", "address")
    )),
    "country": ("Portugal", lambda p, v: p.get("country") == v),
    "region": ("Algarve", lambda p, v: p.get("region") == v),
    "city": ("Lagos", lambda p, v: p.get("city") == v),
    "property_type": ("villa", lambda p, v: p.get("property_type") == v),
    "is_featured": ("true", lambda p, v: p.get("is_featured", False) is True),
    "price_min": ("100000", lambda p, v: _at_least(p.get("price"), float(v))),
    "price_max": ("900000", lambda p, v: _at_most(p.get("price"), float(v))),
    "bedrooms_min": ("2", lambda p, v: _at_least(p.get("bedrooms"), int(v))),
    "bathrooms_min": ("1", lambda p, v: _at_least(p.get("bathrooms"), int(v))),
    "square_footage_min": ("500", lambda p, v: _at_least(p.get("square_footage"), float(v))),
    "square_footage_max": ("5000", lambda p, v: _at_most(p.get("square_footage"), float(v))),
    "land_size_min": ("1", lambda p, v: _at_least(p.get("land_size"), float(v))),
    "land_size_max": ("50", lambda p, v: _at_most(p.get("land_size"), float(v))),
    "year_built_min": ("1950", lambda p, v: _at_least(p.get("year_built"), int(v))),
    "year_built_max": ("2020", lambda p, v: _at_most(p.get("year_built"), int(v))),
    "natural_features": ("river", lambda p, v: _contains(p.get("natural_features"), v)),
    "outdoor_amenities": ("pool", lambda p, v: _contains(p.get("outdoor_amenities"), v)),
}

CATALOGUE = [
    dict(title="Riverside villa", description="Cabin by the river", property_type="villa",
         country="Portugal", region="Algarve", city="Lagos", address="Rua do Rio 1",
         price=350000, bedrooms=3, bathrooms=2, square_footage=1800, land_size=5, year_built=1990,
         natural_features='["river","forest"]', outdoor_amenities='["pool","garden"]', is_featured=True),
    dict(title="Mountain cabin", description="Pine forest retreat", property_type="cabin",
         country="Portugal", region="Norte", city="Braga",
         price=150000, bedrooms=2, bathrooms=1, square_footage=900, land_size=12, year_built=1975,
         natural_features='["mountain","forest"]', outdoor_amenities='["hot tub"]'),
    dict(title="Beach condo", description="Steps from the sand", property_type="condominium",
         country="Costa Rica", region="Guanacaste", city="Tamarindo",
         price=450000, bedrooms=2, bathrooms=2, square_footage=1200, year_built=2015,
         natural_features='["beach"]', outdoor_amenities='["pool"]', is_featured=True),
    dict(title="Algarve farm", description="Orchards near a river bend", property_type="farm",
         country="Portugal", region="Algarve", city="Silves",
         price=600000, bedrooms=5, bathrooms=3, square_footage=4000, land_size=40, year_built=1920,
         natural_features='["river","orchard"]', outdoor_amenities='["barn","pool"]'),
    dict(title="Lagos plot", description=None, property_type="land",
         country="Portugal", region="Algarve", city="Lagos",
         price=90000, land_size=2, natural_features='["ocean view"]'),
    dict(title="Sold villa", description="Already gone", property_type="villa", status="sold",
         country="Portugal", region="Algarve", city="Lagos",
         price=700000, bedrooms=4, bathrooms=3, square_footage=2500, land_size=3, year_built=2001,
         natural_features='["river"]', outdoor_amenities='["pool"]'),
    dict(title="Lakeside house", description="Private dock on the lake", property_type="house",
         country="Canada", region="Ontario", city="Muskoka",
         price=820000, bedrooms=4, bathrooms=3, square_footage=3000, land_size=3, year_built=2005,
         natural_features='["lake","river"]', outdoor_amenities='["dock","pool"]'),
]


@pytest.fixture
def search_service(test_db_session, test_settings):
    """Create SearchService instance for testing"""
    return SearchService(test_db_session, test_settings)


@pytest.fixture
def catalogue(seller, make_property):
    """CATALOGUE stored; maps title to property id"""
    ids = {}
    for row in CATALOGUE:
        ids[row["title"]] = make_property(seller, **row).id
    return ids


async def _search_ids(service, raw):
    raw = dict(raw)
    raw.setdefault("limit", "100")
    result = await service.search_properties(service.normalize(raw))
    return [item.property_id for item in result.items]


def _reference_ids(catalogue, fields):
    """Ids of active CATALOGUE rows matching every given field"""
    matching = set()
    for row in CATALOGUE:
        if row.get("status", "active") != "active":
            continue
        if all(SAMPLE_FILTER[field][1](row, SAMPLE_FILTER[field][0]) for field in fields):
            matching.add(catalogue[row["title"]])
    return matching


class TestPredicates:
    """Each present field adds one predicate; absent fields add none"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", sorted(SAMPLE_FILTER))
    async def test_single_field(self, search_service, catalogue, field):
        ids = await _search_ids(search_service, {field: SAMPLE_FILTER[field][0]})
        assert set(ids) == _reference_ids(catalogue, [field])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("omitted", sorted(SAMPLE_FILTER))
    async def test_omitted_field_contributes_no_constraint(self, search_service, catalogue, omitted):
        remaining = [field for field in SAMPLE_FILTER if field != omitted]
        raw = {field: SAMPLE_FILTER[field][0] for field in remaining}
        ids = await _search_ids(search_service, raw)
        assert set(ids) == _reference_ids(catalogue, remaining)

    @pytest.mark.asyncio
    async def test_no_filter_returns_every_active_listing(self, search_service, catalogue):
        ids = await _search_ids(search_service, {})
        assert set(ids) == _reference_ids(catalogue, [])
        assert catalogue["Sold villa"] not in ids

    @pytest.mark.asyncio
    async def test_explicit_status_selects_other_statuses(self, search_service, catalogue):
        ids = await _search_ids(search_service, {"status": "sold"})
        assert ids == [catalogue["Sold villa"]]

    @pytest.mark.asyncio
    async def test_exact_match_is_case_sensitive(self, search_service, catalogue):
        assert await _search_ids(search_service, {"country": "portugal"}) == []

    @pytest.mark.asyncio
    async def test_range_bounds_are_inclusive(self, search_service, catalogue):
        ids = await _search_ids(search_service, {"price_min": "150000", "price_max": "450000"})
        assert set(ids) == {catalogue["Mountain cabin"], catalogue["Riverside villa"], catalogue["Beach condo"]}

    @pytest.mark.asyncio
    async def test_inverted_range_matches_nothing_by_default(self, search_service, catalogue):
        assert await _search_ids(search_service, {"price_min": "500000", "price_max": "100000"}) == []

    @pytest.mark.asyncio
    async def test_like_wildcards_are_literal(self, search_service, seller, make_property):
        organic = make_property(seller, title="100% organic farm")
        make_property(seller, title="1000 acre ranch")
        assert await _search_ids(search_service, {"query": "100%"}) == [organic.id]
        assert await _search_ids(search_service, {"query": "_"}) == []


class TestOrderingAndPaging:

    @pytest.mark.asyncio
    async def test_sort_by_price_ascending(self, search_service, seller, make_property):
        for price in (500000, 100000, 300000):
            make_property(seller, price=price)
        result = await search_service.search_properties(
            search_service.normalize({"sort_by": "price", "sort_order": "asc"})
        )
        assert [item.price for item in result.items] == [100000, 300000, 500000]

    @pytest.mark.asyncio
    async def test_default_order_is_newest_first(self, search_service, catalogue):
        ids = await _search_ids(search_service, {})
        expected = [catalogue[row["title"]] for row in reversed(CATALOGUE) if row.get("status") != "sold"]
        assert ids == expected

    @pytest.mark.asyncio
    async def test_ties_break_on_id(self, search_service, seller, make_property):
        created = [make_property(seller, price=100000).id for _ in range(5)]
        for sort_order in ("asc", "desc"):
            ids = await _search_ids(search_service, {"sort_by": "price", "sort_order": sort_order})
            assert ids == sorted(created)

    @pytest.mark.asyncio
    async def test_repeated_search_is_identical(self, search_service, catalogue):
        criteria = search_service.normalize({"sort_by": "title", "limit": "3", "offset": "1"})
        first = await search_service.search_properties(criteria)
        second = await search_service.search_properties(criteria)
        assert first.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sort_by", ["price", "created_at", "view_count", "title", "square_footage"])
    async def test_pages_cover_every_match_once(self, search_service, seller, make_property, sort_by):
        for index in range(7):
            make_property(seller, price=100000 * (index % 3), square_footage=None if index % 2 else 800.0)

        collected = []
        offset = 0
        total_count = None
        while total_count is None or offset < total_count:
            result = await search_service.search_properties(
                search_service.normalize({"sort_by": sort_by, "limit": "2", "offset": str(offset)})
            )
            assert len(result.items) <= 2
            total_count = result.total_count
            collected.extend(item.property_id for item in result.items)
            offset += 2

        assert total_count == 7
        assert len(collected) == len(set(collected)) == total_count

    @pytest.mark.asyncio
    async def test_limit_one(self, search_service, catalogue):
        result = await search_service.search_properties(search_service.normalize({"limit": "1", "offset": "0"}))
        assert len(result.items) == 1
        assert result.total_count == 6

    @pytest.mark.asyncio
    async def test_offset_past_the_end(self, search_service, catalogue):
        result = await search_service.search_properties(search_service.normalize({"offset": "6"}))
        assert result.items == []
        assert result.total_count == 6


class TestScenarios:

    @pytest.mark.asyncio
    async def test_country_filter(self, search_service, seller, make_property):
        for country in ("Portugal", "Costa Rica", "Chile", "Canada", "Spain"):
            make_property(seller, country=country)
        result = await search_service.search_properties(search_service.normalize({"country": "Costa Rica"}))
        assert len(result.items) == 1
        assert result.items[0].country == "Costa Rica"

    @pytest.mark.asyncio
    async def test_price_range(self, search_service, seller, make_property):
        for price in (100000, 350000, 450000, 600000):
            make_property(seller, price=price)
        result = await search_service.search_properties(
            search_service.normalize({"price_min": "300000", "price_max": "500000"})
        )
        assert sorted(item.price for item in result.items) == [350000, 450000]
        assert result.total_count == 2


class TestDecoration:

    @pytest.mark.asyncio
    async def test_owner_and_primary_photo(self, search_service, test_db_session, seller, make_property):
        with_photo = make_property(seller, title="Photographed")
        make_property(seller, title="Bare")
        test_db_session.add_all([
            PropertyPhoto(property_id=with_photo.id, photo_url="https://img.example.com/2.jpg", photo_order=2),
            PropertyPhoto(property_id=with_photo.id, photo_url="https://img.example.com/1.jpg",
                          photo_order=1, is_primary=True, caption="Front"),
        ])
        test_db_session.commit()

        result = await search_service.search_properties(search_service.normalize({"sort_by": "title"}))
        by_title = {item.title: item for item in result.items}

        assert by_title["Photographed"].primary_photo.photo_url == "https://img.example.com/1.jpg"
        assert by_title["Photographed"].primary_photo.caption == "Front"
        assert by_title["Bare"].primary_photo is None
        assert by_title["Bare"].owner.name == "Sam Seller"
        assert by_title["Bare"].owner.user_id == seller.id


class TestStorageFailures:

    @pytest.mark.asyncio
    async def test_storage_error_is_raised_not_swallowed(self, test_settings):
        # No tables were created on this engine
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        session = sessionmaker(bind=engine)()
        try:
            service = SearchService(session, test_settings)
            with pytest.raises(StorageError):
                await service.search_properties(service.normalize({}))
        finally:
            session.close()


class TestSearchHistory:

    @pytest.mark.asyncio
    async def test_record_and_list(self, search_service, buyer, identity_for):
        identity = identity_for(buyer)
        first = search_service.normalize({"country": "Chile", "price_max": "400000"})
        second = search_service.normalize({"natural_features": "river", "sort_by": "price"})

        await search_service.record_search(identity, first, results_count=3)
        entry = await search_service.record_search(identity, second, results_count=0)
        assert entry.user_id == buyer.id
        assert entry.sort_by == "price"

        page = await search_service.get_search_history(identity)
        assert page.total_count == 2
        assert {item.country for item in page.search_history} == {"Chile", None}
        assert {item.results_count for item in page.search_history} == {3, 0}

    @pytest.mark.asyncio
    async def test_history_is_scoped_to_the_caller(self, search_service, buyer, seller, identity_for):
        await search_service.record_search(identity_for(seller), search_service.normalize({}), results_count=1)
        page = await search_service.get_search_history(identity_for(buyer))
        assert page.total_count == 0
        assert page.search_history == []
