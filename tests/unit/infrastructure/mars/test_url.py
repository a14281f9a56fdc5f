import pytest

from marsmcp.infrastructure.mars.url import (
    ReportQuery, build_mars_url, build_query, query_pairs, validate_base_url,
)

BASE = "https://example.com/api/"


def test_build_url_is_deterministic():
    params = {"b": 2, "a": "x y"}
    assert build_mars_url(BASE, "/reports", params) == build_mars_url(BASE, "/reports", params)
    assert build_mars_url(BASE, "/reports", params) == "https://example.com/api/reports?b=2&a=x+y"


def test_none_values_are_omitted():
    url = build_mars_url(BASE, "reports", {"q": None, "sort": "-report_date", "tags": [None, "a"]})
    assert url == "https://example.com/api/reports?sort=-report_date&tags=a"


def test_no_params_means_no_question_mark():
    assert build_mars_url(BASE, "/offices") == "https://example.com/api/offices"
    assert build_mars_url(BASE, "/offices", {"q": None}) == "https://example.com/api/offices"


def test_key_casing_is_preserved():
    url = build_mars_url("https://api.example.com", "/check", {"CaseSensitive": "Yes", "lowercase": "no"})
    assert url == "https://api.example.com/check?CaseSensitive=Yes&lowercase=no"


def test_list_values_become_repeated_keys_in_order():
    url = build_mars_url(
        "https://api.nasa.gov/mars-photos/api/v1/rovers/curiosity/",
        "photos",
        {"sol": 1000, "camera": "MAST", "tags": ["a", "b"]},
    )
    assert url == "https://api.nasa.gov/mars-photos/api/v1/rovers/curiosity/photos?sol=1000&camera=MAST&tags=a&tags=b"


@pytest.mark.parametrize("base, path", [
    ("https://example.com/api", "reports"),
    ("https://example.com/api/", "reports"),
    ("https://example.com/api", "/reports"),
    ("https://example.com/api/", "/reports"),
    ("https://example.com/api//", "//reports"),
])
def test_exactly_one_slash_between_base_and_path(base, path):
    assert build_mars_url(base, path) == "https://example.com/api/reports"


def test_booleans_render_lowercase():
    url = build_mars_url(BASE, "/reports/1280", {"allSections": True, "correctionsOnly": False})
    assert url.endswith("?allSections=true&correctionsOnly=false")


def test_reserved_characters_are_encoded():
    url = build_mars_url(BASE, "/reports/1280", {"q": "commodity=Feeder Cattle;class=Steers"})
    assert url == "https://example.com/api/reports/1280?q=commodity%3DFeeder+Cattle%3Bclass%3DSteers"


@pytest.mark.parametrize("bad", ["not a url", "ftp://example.com/", "/relative/path", "https://"])
def test_invalid_base_url_raises(bad):
    with pytest.raises(ValueError, match="Invalid base URL"):
        build_mars_url(bad, "/reports")


def test_validate_base_url_returns_input():
    assert validate_base_url(BASE) == BASE


def test_query_pairs_tuple_values():
    assert query_pairs({"x": (1, 2.5)}) == [("x", "1"), ("x", "2.5")]
    assert query_pairs(None) == []


def test_build_query_with_filters():
    query = ReportQuery(q="commodity=Feeder Cattle", sort="-report_date", all_sections=True)
    assert build_query(query) == "?q=commodity%3DFeeder+Cattle&sort=-report_date&allSections=true"


def test_build_query_corrections_only():
    assert build_query(ReportQuery(corrections_only=True)) == "?correctionsOnly=true"


def test_build_query_empty():
    assert build_query(ReportQuery()) == ""


def test_report_query_keeps_zero_counts():
    params = ReportQuery(last_days=0, last_reports=3, any_changes_since="01/02/2024", ds_id="abc").to_params()
    assert params == {"anyChangesSince": "01/02/2024", "lastDays": 0, "lastReports": 3, "dsId": "abc"}
