"""Resource references: attribute URIs that point at store resources.

Map attributes such as ``details`` and ``thumbnail`` hold a URI of the form
``<store-url>/data/<id>/raw?decode=datauri``, percent-encoded once because the
value travels inside a URL path segment. ``NODATA`` marks an attribute whose
resource has been removed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final
from urllib.parse import quote, unquote

from .errors import InvalidResourceReferenceError

NO_DATA: Final[str] = "NODATA"
RAW_DATA_URI_TAIL: Final[str] = "/raw?decode=datauri"

_DATA_ID_PATTERN = re.compile(r"(?:^|/)data/(\d+)(?=[/?#]|$)")


def is_absent(value: str | None) -> bool:
    """``None``, blank strings and the ``NODATA`` sentinel all mean "no resource"."""

    return value is None or not value.strip() or value.strip() == NO_DATA


def _fully_unquote(value: str) -> str:
    # attribute values may have been encoded more than once on their way to the store
    previous = value
    for _ in range(5):
        decoded = unquote(previous)
        if decoded == previous:
            break
        previous = decoded
    return previous


def extract_resource_id(uri: str | None) -> int | None:
    """Return the store id encoded in ``uri`` or ``None`` when there is none."""

    if uri is None or is_absent(uri):
        return None
    # the store url itself may contain a data/<digits> segment; the resource id comes last
    ids = _DATA_ID_PATTERN.findall(_fully_unquote(uri))
    if not ids:
        return None
    return int(ids[-1])


def build_resource_uri(
    store_url: str,
    resource_id: int,
    *,
    tail: str = RAW_DATA_URI_TAIL,
    version: str | None = None,
) -> str:
    """Build the download/display URL of a stored resource."""

    uri = f"{store_url.rstrip('/')}/data/{resource_id}{tail}"
    if version:
        separator = "&" if "?" in uri else "?"
        uri = f"{uri}{separator}v={version}"
    return uri


def encode_attribute_uri(uri: str) -> str:
    return quote(uri, safe="")


def decode_attribute_uri(value: str) -> str:
    return _fully_unquote(value)


@dataclass(frozen=True, slots=True)
class ResourceRef:
    """Pointer from a map attribute to a store resource.

    Absent references normalise to ``uri=None``; a present uri must encode an id.
    """

    uri: str | None = None

    def __post_init__(self) -> None:
        if self.uri is not None and is_absent(self.uri):
            object.__setattr__(self, "uri", None)
            return
        if self.uri is not None and extract_resource_id(self.uri) is None:
            raise InvalidResourceReferenceError(f"No resource id in reference: {self.uri!r}")

    @property
    def id(self) -> int | None:
        return extract_resource_id(self.uri)

    @property
    def present(self) -> bool:
        return self.uri is not None

    @classmethod
    def to_resource(cls, store_url: str, resource_id: int) -> ResourceRef:
        return cls(build_resource_uri(store_url, resource_id))
