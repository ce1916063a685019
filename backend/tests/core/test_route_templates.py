"""Route Templates: deterministic, URL-encoded, fail-fast paths."""

import pytest

from person_api.core.errors import InvalidParamsError
from person_api.core.route_templates import build_path, required_params


def test_builds_name_lookup_path():
    assert build_path("get_by_name", {"name": "peter"}) == "/?name=peter"


def test_values_are_url_encoded():
    assert build_path("get_by_name", {"name": "Anne Marie"}) == "/?name=Anne%20Marie"
    assert build_path("get_by_name", {"name": "a&b=c/d"}) == "/?name=a%26b%3Dc%2Fd"
    assert build_path("get_by_name", {"name": "José"}) == "/?name=Jos%C3%A9"


def test_same_input_same_output():
    params = {"name": "peter"}
    assert build_path("get_by_name", params) == build_path("get_by_name", params)


@pytest.mark.parametrize("params", [{}, {"name": None}, {"name": ""}, {"name": "   "}])
def test_missing_or_blank_params_fail_fast(params):
    with pytest.raises(InvalidParamsError) as exc:
        build_path("get_by_name", params)
    assert exc.value.http_status == 400
    assert exc.value.context.operation == "get_by_name"


def test_unknown_operation_fails():
    with pytest.raises(InvalidParamsError):
        build_path("get_by_last_name", {"last_name": "parker"})


def test_custom_templates():
    templates = {"get_country": "/countries/{code}/people?limit={limit}"}

    assert required_params(templates["get_country"]) == ["code", "limit"]
    assert build_path("get_country", {"code": "PT", "limit": 5}, templates) == (
        "/countries/PT/people?limit=5"
    )
