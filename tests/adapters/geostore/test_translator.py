from __future__ import annotations

import pytest
from pydantic import ValidationError

from mapflow.adapters.geostore import translate_attributes, translate_search_response
from mapflow.adapters.geostore.translator import (
    metadata_body,
    resource_request_body,
    serialize_data,
)
from mapflow.domain.model import NewResource, ResourceCategory


def test_translate_search_response_with_many_results() -> None:
    payload = {
        "results": [
            {"id": 1, "name": "a", "canDelete": True, "owner": "alice", "unknown": "x"},
            {"id": 2, "name": "b", "thumbnail": "http%3A%2F%2Fstore%2Fdata%2F9%2Fraw"},
        ],
        "totalCount": 30,
    }

    page = translate_search_response(payload)

    assert page.total_count == 30
    assert [item.id for item in page.results] == [1, 2]
    assert page.results[0].can_delete
    assert page.results[0].owner == "alice"
    assert page.results[1].thumbnail == "http%3A%2F%2Fstore%2Fdata%2F9%2Fraw"


def test_translate_search_response_without_results() -> None:
    page = translate_search_response({"results": "", "totalCount": 0, "success": True})

    assert page.results == ()
    assert page.success


def test_translate_attributes_rejects_nameless_entries() -> None:
    with pytest.raises(ValidationError):
        translate_attributes({"AttributeList": {"Attribute": [{"value": "x"}]}})


@pytest.mark.parametrize(
    ("data", "expected"),
    [(None, ""), ("<p>x</p>", "<p>x</p>"), ({"a": [1]}, '{"a": [1]}')],
)
def test_serialize_data(data: object, expected: str) -> None:
    assert serialize_data(data) == expected


def test_resource_request_body_includes_attributes() -> None:
    resource = NewResource(
        metadata={"name": "m", "description": "d"},
        data="",
        category=ResourceCategory.MAP,
        attributes={"owner": "alice"},
    )

    body = resource_request_body(resource)["Resource"]

    assert body["description"] == "d"  # type: ignore[index]
    assert body["Attributes"] == {  # type: ignore[index]
        "attribute": [{"name": "owner", "value": "alice", "type": "STRING"}]
    }


def test_metadata_body_keeps_name_and_description_only() -> None:
    assert metadata_body({"name": "n", "description": "d", "id": 3}) == {
        "RestResource": {"name": "n", "description": "d"}
    }
