"""GeoStore persistence adapter."""

from __future__ import annotations

from .client import GeoStoreAPIError, GeoStoreClient
from .gateway import GeoStoreGateway, search_pattern
from .schema import AttributeListResponse, SearchResponse
from .translator import translate_attributes, translate_search_response

__all__ = [
    "AttributeListResponse",
    "GeoStoreAPIError",
    "GeoStoreClient",
    "GeoStoreGateway",
    "SearchResponse",
    "search_pattern",
    "translate_attributes",
    "translate_search_response",
]
