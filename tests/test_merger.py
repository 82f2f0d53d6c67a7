from provider_enrichment.merger import index_by_id, merge_provider, merge_providers
from provider_enrichment.records import dumps_providers

BASE = [
    {"id": "a", "name": "Clinic A", "country": "PH", "city": "Manila"},
    {
        "id": "b",
        "name": "Bangkok Hospital Pattaya",
        "country": "TH",
        "city": "Pattaya",
        "regionTag": "Chonburi",
        "phone": "+66 38 259 999",
        "policy": "Direct billing",
        "caution": "Call ahead",
        "lat": 12.9,
        "lng": 100.9,
        "gmaps": {"placeId": "old-b", "url": "https://maps.example/old-b"},
    },
    {"id": "c", "name": "Clinic C", "country": "PH", "city": "Cebu", "lat": 10.3, "lng": 123.9},
]

ENRICHED = [
    {
        "id": "a",
        "name": "Clinic A",
        "country": "PH",
        "city": "Manila",
        "gmaps": {
            "placeId": "p1",
            "formattedName": "Clinic A (Official)",
            "formattedAddress": "123 Main St, Manila",
            "location": {"lat": 14.6, "lng": 121.0},
        },
    },
    {
        "id": "b",
        "name": "Renamed By Enrichment",
        "country": "XX",
        "city": "Elsewhere",
        "phone": "000",
        "policy": "none",
        "caution": "",
        "gmaps": {"placeId": "new-b", "formattedName": "Bangkok Hospital Pattaya", "location": {"lat": 12.95, "lng": 100.89}},
    },
    {"name": "no id at all"},
    {"id": "zzz", "name": "Not in base", "country": "PH", "city": "Davao", "gmaps": {"placeId": "pz"}},
]


def test_scenario_overwrite_geo_adopts_enriched_location():
    merged = merge_providers(BASE[:1], ENRICHED[:1], overwrite_geo=True)

    assert merged[0]["lat"] == 14.6
    assert merged[0]["lng"] == 121.0
    assert merged[0]["gmaps"]["placeId"] == "p1"


def test_base_coordinates_kept_without_overwrite_flag():
    merged = merge_providers(BASE, ENRICHED)

    assert "lat" not in merged[0] and "lng" not in merged[0]
    assert merged[1]["lat"] == 12.9 and merged[1]["lng"] == 100.9


def test_curated_fields_always_come_from_base():
    merged = merge_providers(BASE, ENRICHED, overwrite_geo=True)

    for base, out in zip(BASE, merged):
        for field in ("id", "name", "country", "city", "regionTag", "phone", "policy", "caution"):
            assert out.get(field) == base.get(field)


def test_gmaps_overlay_enriched_wins_and_base_fills_gaps():
    merged = merge_providers(BASE, ENRICHED)

    assert merged[1]["gmaps"] == {
        "placeId": "new-b",
        "url": "https://maps.example/old-b",
        "formattedName": "Bangkok Hospital Pattaya",
        "location": {"lat": 12.95, "lng": 100.89},
    }


def test_enriched_without_gmaps_keeps_base_block():
    enriched = [{"id": "b", "name": "x", "country": "TH", "city": "Pattaya"}]
    merged = merge_provider(BASE[1], enriched[0], overwrite_geo=True)

    assert merged["gmaps"] == BASE[1]["gmaps"]
    assert merged["lat"] == 12.9


def test_invalid_location_never_overwrites_coordinates():
    enriched = {"id": "c", "gmaps": {"placeId": "pc", "location": {"lat": "10.31", "lng": 123.89}}}
    merged = merge_provider(BASE[2], enriched, overwrite_geo=True)

    assert merged["lat"] == 10.3 and merged["lng"] == 123.9
    assert merged["gmaps"]["placeId"] == "pc"


def test_unmatched_and_malformed_entries_are_ignored():
    merged = merge_providers(BASE, ENRICHED)

    assert len(merged) == len(BASE)
    assert [r["id"] for r in merged] == ["a", "b", "c"]
    assert merged[2] is BASE[2]
    assert all(r.get("gmaps", {}).get("placeId") != "pz" for r in merged)


def test_merge_does_not_mutate_inputs_and_omits_undefined_fields():
    merged = merge_providers(BASE, ENRICHED)

    assert "gmaps" not in BASE[0]
    assert all(v is not None for r in merged for v in r.values())
    assert list(merged[0]) == ["id", "name", "country", "city", "gmaps"]


def test_merge_is_idempotent():
    first = merge_providers(BASE, ENRICHED, overwrite_geo=True)
    again = merge_providers(BASE, ENRICHED, overwrite_geo=True)
    refolded = merge_providers(first, ENRICHED, overwrite_geo=True)

    assert dumps_providers(first) == dumps_providers(again)
    assert dumps_providers(refolded) == dumps_providers(first)


def test_extra_base_fields_survive_merge():
    base = dict(BASE[0], website="https://clinic-a.example")
    merged = merge_provider(base, ENRICHED[0])

    assert merged["website"] == "https://clinic-a.example"


def test_index_by_id_skips_entries_without_string_id():
    index = index_by_id([{"id": "a"}, {"name": "x"}, {"id": 7}, "junk", {"id": "a", "v": 2}])

    assert list(index) == ["a"]
    assert index["a"]["v"] == 2


def test_non_object_base_gmaps_is_replaced_not_crashed_on():
    base = {"id": "a", "name": "Clinic A", "country": "PH", "city": "Manila", "gmaps": "x"}
    merged = merge_provider(base, {"id": "a", "gmaps": {"placeId": "p"}})

    assert merged["gmaps"] == {"placeId": "p"}
