import pytest

from provider_enrichment.indexer import ProviderIndexer


def test_indexer_basic_search():
    docs = [
        {"id": "a", "name": "Manila Dental Clinic", "country": "PH", "city": "Manila"},
        {"id": "b", "name": "Bangkok Hospital", "country": "TH", "city": "Bangkok"},
        {"id": "c", "name": "Cebu Doctors Hospital", "country": "PH", "city": "Cebu City"},
    ]

    idx = ProviderIndexer()
    idx.fit(docs)
    results = idx.search("dental manila", top_k=2)
    assert results, "Expected non-empty results"
    assert results[0]["id"] == "a"
    assert results[0]["city"] == "Manila"
    assert all(r["score"] > 0 for r in results)


def test_indexer_matches_policy_and_formatted_address():
    docs = [
        {"id": "a", "name": "Clinic A", "country": "PH", "city": "Manila", "policy": "Accepts FMP billing"},
        {
            "id": "b",
            "name": "Clinic B",
            "country": "TH",
            "city": "Pattaya",
            "gmaps": {"placeId": "p2", "formattedAddress": "Sukhumvit Road, Pattaya"},
        },
    ]

    idx = ProviderIndexer()
    idx.fit(docs)
    assert [r["id"] for r in idx.search("fmp billing")] == ["a"]
    assert [r["id"] for r in idx.search("sukhumvit")] == ["b"]


def test_indexer_search_before_fit_raises():
    with pytest.raises(RuntimeError):
        ProviderIndexer().search("anything")
