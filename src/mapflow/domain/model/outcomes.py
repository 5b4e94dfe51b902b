"""Per-call outcomes and their aggregates.

Outcomes are produced once per remote call and never mutated. Aggregates keep
every constituent outcome so callers can report failures per resource.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import LifecycleAction, OutcomeResult, ResourceKind

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True, kw_only=True)
class OperationOutcome:
    kind: ResourceKind
    result: OutcomeResult
    payload: object = None
    error: Exception | None = None
    resource_id: int | None = None
    subject: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.result is OutcomeResult.SUCCESS

    @property
    def failed(self) -> bool:
        return self.result is OutcomeResult.ERROR

    @classmethod
    def success(
        cls,
        kind: ResourceKind,
        payload: object = None,
        *,
        resource_id: int | None = None,
        subject: str | None = None,
    ) -> OperationOutcome:
        return cls(
            kind=kind,
            result=OutcomeResult.SUCCESS,
            payload=payload,
            resource_id=resource_id,
            subject=subject,
        )

    @classmethod
    def failure(
        cls,
        kind: ResourceKind,
        error: Exception,
        *,
        resource_id: int | None = None,
        subject: str | None = None,
    ) -> OperationOutcome:
        return cls(
            kind=kind,
            result=OutcomeResult.ERROR,
            error=error,
            resource_id=resource_id,
            subject=subject,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class DeleteEntityOutcome:
    map_id: int
    thumbnail: OperationOutcome
    details: OperationOutcome
    map: OperationOutcome

    def __iter__(self) -> Iterator[OperationOutcome]:
        return iter((self.thumbnail, self.details, self.map))

    @property
    def all_succeeded(self) -> bool:
        return all(outcome.succeeded for outcome in self)

    @property
    def failures(self) -> tuple[OperationOutcome, ...]:
        return tuple(outcome for outcome in self if outcome.failed)


@dataclass(frozen=True, slots=True, kw_only=True)
class AttributeChangeOutcome:
    """Result of reconciling one linked attribute.

    ``attribute_value`` is the value now stored on the map attribute (an
    encoded URI or ``NODATA``) when the change succeeded and touched it.
    """

    attribute: str
    action: LifecycleAction
    outcome: OperationOutcome
    attribute_value: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SaveEntityOutcome:
    created: bool
    entity: OperationOutcome
    attributes: tuple[AttributeChangeOutcome, ...] = ()

    @property
    def map_id(self) -> int | None:
        return self.entity.resource_id

    @property
    def attribute_failures(self) -> tuple[AttributeChangeOutcome, ...]:
        return tuple(change for change in self.attributes if change.outcome.failed)


@dataclass(frozen=True, slots=True, kw_only=True)
class BackgroundThumbnailOutcome:
    background_id: str
    action: LifecycleAction
    outcome: OperationOutcome
    source: str | None = None

    @property
    def thumb_id(self) -> int | None:
        if self.action is LifecycleAction.CREATE and self.outcome.succeeded:
            return self.outcome.resource_id
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class BackgroundThumbnailsOutcome:
    results: tuple[BackgroundThumbnailOutcome, ...] = ()
    removed_resources: tuple[int, ...] = ()
