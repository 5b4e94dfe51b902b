"""GeoStore REST payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mapflow.domain.model import AttributeType


class GeoStoreBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _as_list(value: object) -> object:
    # GeoStore collapses one-element lists to a bare object and empty ones to ""
    if value is None or value == "":
        return []
    if isinstance(value, dict):
        return [value]
    return value


class AttributePayload(GeoStoreBaseModel):
    name: str
    value: str | None = None
    type: AttributeType = AttributeType.STRING


class AttributeList(GeoStoreBaseModel):
    attributes: list[AttributePayload] = Field(default_factory=list, alias="Attribute")

    @field_validator("attributes", mode="before")
    @classmethod
    def _coerce_attributes(cls, value: object) -> object:
        return _as_list(value)


class AttributeListResponse(GeoStoreBaseModel):
    attribute_list: AttributeList = Field(default_factory=AttributeList, alias="AttributeList")

    @field_validator("attribute_list", mode="before")
    @classmethod
    def _coerce_list(cls, value: object) -> object:
        if value is None or value == "":
            return {}
        return value


class SearchResultPayload(GeoStoreBaseModel):
    id: int
    name: str
    description: str | None = None
    owner: str | None = None
    details: str | None = None
    thumbnail: str | None = None
    can_edit: bool = Field(default=False, alias="canEdit")
    can_delete: bool = Field(default=False, alias="canDelete")
    can_copy: bool = Field(default=False, alias="canCopy")


class SearchResponse(GeoStoreBaseModel):
    results: list[SearchResultPayload] = Field(default_factory=list)
    total_count: int = Field(default=0, alias="totalCount")
    success: bool = True

    @field_validator("results", mode="before")
    @classmethod
    def _coerce_results(cls, value: object) -> object:
        return _as_list(value)
