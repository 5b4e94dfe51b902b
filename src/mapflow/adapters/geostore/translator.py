"""Translate between GeoStore payloads and domain objects."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from mapflow.domain.model import ResourceAttribute, ResourcePage, ResourceSummary

from .schema import AttributeListResponse, SearchResponse

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mapflow.domain.model import NewResource, Permissions


def translate_attributes(payload: object) -> list[ResourceAttribute]:
    response = AttributeListResponse.model_validate(payload)
    return [
        ResourceAttribute(name=item.name, value=item.value, type=item.type)
        for item in response.attribute_list.attributes
    ]


def translate_search_response(payload: object) -> ResourcePage:
    response = SearchResponse.model_validate(payload)
    return ResourcePage(
        results=tuple(
            ResourceSummary(
                id=item.id,
                name=item.name,
                description=item.description,
                owner=item.owner,
                details=item.details,
                thumbnail=item.thumbnail,
                can_edit=item.can_edit,
                can_delete=item.can_delete,
                can_copy=item.can_copy,
            )
            for item in response.results
        ),
        total_count=response.total_count,
        success=response.success,
    )


def serialize_data(data: object) -> str:
    """Stored data is text; anything else (a map configuration) goes as JSON."""

    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return json.dumps(data)


def resource_request_body(resource: NewResource) -> dict[str, object]:
    metadata = resource.metadata
    body: dict[str, object] = {
        "name": metadata.get("name"),
        "description": metadata.get("description", ""),
        "metadata": metadata.get("metadata", ""),
        "category": {"name": str(resource.category)},
        "store": {"data": serialize_data(resource.data)},
    }
    if resource.attributes:
        body["Attributes"] = {
            "attribute": [
                {"name": name, "value": value, "type": "STRING"}
                for name, value in resource.attributes.items()
            ]
        }
    return {"Resource": body}


def metadata_body(metadata: Mapping[str, object]) -> dict[str, object]:
    body = {key: metadata[key] for key in ("name", "description") if key in metadata}
    return {"RestResource": body}


def security_rules_body(rules: Permissions) -> dict[str, object]:
    entries: list[dict[str, object]] = []
    for rule in rules:
        entry: dict[str, object] = {"canRead": rule.can_read, "canWrite": rule.can_write}
        if rule.user is not None:
            entry["user"] = {"name": rule.user}
        else:
            entry["group"] = {"groupName": rule.group}
        entries.append(entry)
    return {"SecurityRuleList": {"SecurityRule": entries}}
