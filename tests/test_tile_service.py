from conftest import JEDDAH, RIYADH, FakePropertyStore, make_property

from terreno.geo import token_at_level
from terreno.models import TileFilters, TileRequest
from terreno.tiles import TileQueryService


def _service(rows):
    store = FakePropertyStore(rows)
    return TileQueryService(property_repo=store), store


def _tiles_around(*points, level=14):
    return [token_at_level(lat, lng, level) for lat, lng in points]


def test_empty_tiles_return_no_items_and_skip_the_store():
    service, store = _service([make_property("a")])

    response = service.get_tiles(TileRequest(tiles=[], level=10))

    assert response.to_dict() == {
        "mode": "points",
        "items": [],
        "meta": {"cap": 800, "levelUsed": "s2_l10", "level": 10, "tilesCount": 0},
    }
    assert store.calls == []


def test_returns_listings_inside_the_requested_cells():
    near = [make_property("b", 24.7140, 46.6760), make_property("a", *RIYADH)]
    far = make_property("z", *JEDDAH, city="Jeddah")
    service, store = _service(near + [far])

    request = TileRequest(tiles=_tiles_around((24.7140, 46.6760), RIYADH), level=10)
    response = service.get_tiles(request)

    assert [item.id for item in response.items] == ["a", "b"]
    assert response.meta.level_used == "s2_l10"
    assert response.meta.tiles_count == 2
    assert store.calls[0]["column"] == "s2_l10"
    assert store.calls[0]["tokens"] == {token_at_level(*RIYADH, 10), token_at_level(24.7140, 46.6760, 10)}
    assert store.calls[0]["limit"] == 800


def test_single_tile_string_is_accepted():
    service, _ = _service([make_property("a")])

    request = TileRequest.model_validate({"tiles": token_at_level(*RIYADH, 12), "level": 12})
    response = service.get_tiles(request)

    assert [item.id for item in response.items] == ["a"]
    assert response.meta.tiles_count == 1


def test_results_are_capped_by_zoom_level():
    rows = [make_property(f"p{i:04d}") for i in range(305)]
    service, _ = _service(rows)

    response = service.get_tiles(TileRequest(tiles=_tiles_around(RIYADH), level=6))

    assert response.meta.cap == 300
    assert len(response.items) == 300
    # Orden por id: el recorte es determinístico
    assert response.items[0].id == "p0000"
    assert response.items[-1].id == "p0299"


def test_search_or_city_filter():
    rows = [
        make_property("a", title="Luxury villa", city="Riyadh"),
        make_property("b", title="Flat", city="dammam"),
        make_property("c", title="Flat", city="Riyadh"),
    ]
    service, _ = _service(rows)

    filters = TileFilters(search="VILLA", cities=["Dammam"])
    response = service.get_tiles(TileRequest(tiles=_tiles_around(RIYADH), level=12, filters=filters))

    assert [item.id for item in response.items] == ["a", "b"]


def test_attribute_filters_are_combined_with_and():
    rows = [
        make_property("a", type="villa", price=900000),
        make_property("b", type="villa", price=200000),
        make_property("c", type="apartment", price=900000),
    ]
    service, _ = _service(rows)

    filters = TileFilters(types=["villa"], min_price=500000)
    response = service.get_tiles(TileRequest(tiles=_tiles_around(RIYADH), level=16, filters=filters))

    assert [item.id for item in response.items] == ["a"]
    assert response.meta.cap == 4000


def test_owner_role_and_developer_filters_use_related_rows():
    rows = [
        make_property("a", owner={"role": "BROKER", "broker": {"license_number": "L-1"}}),
        make_property("b", owner={"role": "OWNER", "broker": None}, project={"developer_id": "d-1"}),
        make_property("c", owner={"role": "DEVELOPER", "broker": None}, project={"developer_id": "d-2"}),
    ]
    service, _ = _service(rows)
    tiles = _tiles_around(RIYADH)

    brokers = service.get_tiles(TileRequest(tiles=tiles, level=12, filters=TileFilters(owner_role="BROKER")))
    developer = service.get_tiles(TileRequest(tiles=tiles, level=12, filters=TileFilters(developer_id="d-1")))

    assert [item.id for item in brokers.items] == ["a"]
    assert brokers.items[0].broker_license_number == "L-1"
    assert [item.id for item in developer.items] == ["b"]


def test_listing_projection_is_camel_case_with_cover_thumbnail():
    media = [
        {"url": "https://cdn/2.jpg", "created_at": "2024-02-01T00:00:00Z"},
        {"url": "https://cdn/1.jpg", "created_at": "2024-01-01T00:00:00Z"},
    ]
    row = make_property("a", number_of_rooms=3, number_of_wc=2, space=120, media=media)
    service, _ = _service([row])

    response = service.get_tiles(TileRequest(tiles=_tiles_around(RIYADH), level=14))
    item = response.to_dict()["items"][0]

    assert item["thumbnail"] == "https://cdn/1.jpg"
    assert item["location"] == {"lat": RIYADH[0], "lng": RIYADH[1]}
    assert item["numberOfRooms"] == 3
    assert item["numberOfWC"] == 2
    assert item["unitStatus"] == "available"
    assert item["ownerRole"] == "OWNER"
    assert item["brokerLicenseNumber"] is None


def test_tiles_at_zoom_between_storage_levels():
    service, store = _service([make_property("a"), make_property("z", *JEDDAH, city="Jeddah")])

    for level in (13, 14, 15):
        response = service.get_tiles(TileRequest(tiles=_tiles_around(RIYADH, level=level), level=level))

        assert [item.id for item in response.items] == ["a"]
        assert response.meta.level_used == "s2_l16"
        assert len(store.calls[-1]["tokens"]) == 4 ** (16 - level)
