import asyncio

import httpx
import pytest

from pinpoint.exceptions import GeometryUnavailable
from pinpoint.models.game import Coordinate
from pinpoint.services.countries import continent_of, country_name
from pinpoint.services.geo_index import GeoIndex
from pinpoint.services.topology import decode_arcs, decode_features, densify, great_circle_points

TOPOLOGY_URL = "https://atlas.test/countries.json"


def square(lng, lat, size):
    return [[lng, lat], [lng + size, lat], [lng + size, lat + size], [lng, lat + size], [lng, lat]]


def test_decode_quantized_arcs(topology):
    arcs = decode_arcs(topology)
    assert arcs[0][0] == (-5.0, 42.0)
    assert arcs[0][2] == (8.0, 51.0)
    assert arcs[1][1] == (-35.0, -33.0)


def test_decode_features_skips_null_geometries(topology):
    features = decode_features(topology, "countries")
    assert [f.id for f in features] == ["250", "076", "999"]
    assert features[1].name == "Brasil"


def test_decode_rejects_other_documents(topology):
    with pytest.raises(ValueError):
        decode_features({"type": "FeatureCollection", "features": []}, "countries")
    with pytest.raises(ValueError):
        decode_features(topology, "rivers")


def test_reversed_arc_reference_decodes_same_area(land_index):
    assert land_index.contains(Coordinate(lat=-10, lng=-50))
    assert land_index.contains(Coordinate(lat=46, lng=2))
    assert not land_index.contains(Coordinate(lat=0, lng=-150))


def test_contains_includes_boundary(countries_index):
    assert countries_index.contains(Coordinate(lat=42, lng=-5))
    assert countries_index.contains(Coordinate(lat=51, lng=8))
    assert not countries_index.contains(Coordinate(lat=51.01, lng=8))


def box_index(west, south, east, north):
    topology = {
        "type": "Topology",
        "arcs": [[[west, south], [east, south], [east, north], [west, north], [west, south]]],
        "objects": {"box": {"type": "Polygon", "arcs": [[0]]}},
    }
    return GeoIndex.from_topology(topology, "box")


def test_edges_follow_great_circles():
    # The northern edge from (-120, 49) to (-90, 49) peaks near 49.98 at lng -105
    index = box_index(-120, 40, -90, 49)
    assert index.contains(Coordinate(lat=49.5, lng=-105))
    assert not index.contains(Coordinate(lat=50.5, lng=-105))
    # and the southern edge rises to about 40.98
    assert not index.contains(Coordinate(lat=40.5, lng=-105))
    assert index.contains(Coordinate(lat=41.5, lng=-105))


def test_southern_edges_bow_towards_the_south_pole():
    index = box_index(-120, -49, -90, -40)
    assert index.contains(Coordinate(lat=-49.5, lng=-105))
    assert not index.contains(Coordinate(lat=-40.5, lng=-105))


def test_fixture_edges_are_spherical(countries_index):
    assert countries_index.country_at(Coordinate(lat=-34, lng=-54.5)) == "Brazil"
    assert countries_index.country_at(Coordinate(lat=-34.7, lng=-54.5)) is None
    assert countries_index.country_at(Coordinate(lat=20.03, lng=-35)) is None
    assert countries_index.country_at(Coordinate(lat=20.1, lng=-35)) == "Atlantis"


def test_great_circle_points_spacing():
    points = great_circle_points((-120.0, 49.0), (-90.0, 49.0), max_degrees=0.5)
    assert len(points) == 39
    assert all(-120 < lng < -90 for lng, _ in points)
    assert max(lat for _, lat in points) == pytest.approx(49.98, abs=0.01)


def test_equator_edges_stay_on_the_equator():
    points = great_circle_points((0.0, 0.0), (10.0, 0.0), max_degrees=1.0)
    lngs = [lng for lng, _ in points]
    assert lngs == sorted(lngs)
    assert 0 < lngs[0] and lngs[-1] < 10
    assert all(lat == pytest.approx(0.0, abs=1e-12) for _, lat in points)


@pytest.mark.parametrize("start, end", [
    ((8.0, 42.0), (8.0, 51.0)),
    ((180.0, -90.0), (-180.0, -90.0)),
    ((170.0, -85.0), (-170.0, -85.0)),
    ((10.0, -90.0), (20.0, -80.0)),
    ((1.0, 1.0), (1.1, 1.0)),
])
def test_straight_edges_are_left_alone(start, end):
    assert great_circle_points(start, end) == []
    assert densify([start, end]) == [start, end]


def test_country_at_prefers_code_table_over_feature_name(countries_index):
    assert countries_index.country_at(Coordinate(lat=-10, lng=-50)) == "Brazil"
    assert countries_index.country_at(Coordinate(lat=46, lng=2)) == "France"


def test_country_at_falls_back_to_feature_name(countries_index):
    assert countries_index.country_at(Coordinate(lat=25, lng=-35)) == "Atlantis"


def test_country_at_over_water(countries_index):
    assert countries_index.country_at(Coordinate(lat=0, lng=-150)) is None


def test_country_at_skips_unnamed_features():
    topology = {
        "type": "Topology",
        "arcs": [square(0, 0, 10), square(0, 0, 10)],
        "objects": {
            "countries": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": "010", "arcs": [[0]]},
                    {"type": "Polygon", "id": "250", "arcs": [[1]]},
                ],
            }
        },
    }
    index = GeoIndex.from_topology(topology, "countries")
    assert index.country_at(Coordinate(lat=5, lng=5)) == "France"


def test_country_name_lookup():
    assert country_name("076") == "Brazil"
    assert country_name("250", "Ignored") == "France"
    assert country_name("999", "Atlantis") == "Atlantis"
    assert country_name(None, None) is None
    assert country_name("-99", "") is None


def test_continent_lookup():
    assert continent_of("Brazil") == "South America"
    assert continent_of("France") == "Europe"
    assert continent_of("Atlantis") == "Unknown"


def test_lookups_require_load():
    index = GeoIndex(TOPOLOGY_URL, "countries")
    assert not index.loaded
    with pytest.raises(RuntimeError):
        index.contains(Coordinate(lat=0, lng=0))


async def test_concurrent_loads_share_one_fetch(topology):
    calls = []

    async def handler(request):
        calls.append(request.url)
        await asyncio.sleep(0.01)
        return httpx.Response(200, json=topology)

    index = GeoIndex(TOPOLOGY_URL, "countries", transport=httpx.MockTransport(handler))
    results = await asyncio.gather(*(index.load() for _ in range(5)))

    assert len(calls) == 1
    assert all(r is results[0] for r in results)
    assert index.loaded
    assert index.country_at(Coordinate(lat=46, lng=2)) == "France"

    await index.load()
    assert len(calls) == 1


async def test_load_failure_raises_geometry_unavailable(topology):
    responses = [httpx.Response(500, text="boom"), httpx.Response(200, json=topology)]

    def handler(request):
        return responses.pop(0)

    index = GeoIndex(TOPOLOGY_URL, "countries", transport=httpx.MockTransport(handler))
    with pytest.raises(GeometryUnavailable) as exc_info:
        await index.load()
    assert exc_info.value.source == TOPOLOGY_URL
    assert not index.loaded

    # A failed load is not cached
    features = await index.load()
    assert len(features) == 3


async def test_network_error_raises_geometry_unavailable():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    index = GeoIndex(TOPOLOGY_URL, "countries", transport=httpx.MockTransport(handler))
    with pytest.raises(GeometryUnavailable):
        await index.load()


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>not json</html>"),
    httpx.Response(200, json={"type": "Topology", "arcs": [], "objects": {}}),
    httpx.Response(200, json=[1, 2, 3]),
])
async def test_undecodable_documents_raise_geometry_unavailable(response):
    index = GeoIndex(TOPOLOGY_URL, "countries", transport=httpx.MockTransport(lambda r: response))
    with pytest.raises(GeometryUnavailable):
        await index.load()
