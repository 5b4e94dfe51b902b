"""Create/update/delete decision for a linked resource.

``decide`` only classifies; the coordinator issues the resulting calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mapflow.domain.model import LifecycleAction

if TYPE_CHECKING:
    from mapflow.domain.model import LinkedResource, Permissions, ResourceRef


@dataclass(frozen=True, slots=True, kw_only=True)
class Decision:
    action: LifecycleAction
    resource_id: int | None = None
    resource: LinkedResource | None = None

    @property
    def permissions(self) -> Permissions | None:
        """Permissions to write; ``None`` leaves the stored ones in place."""

        if self.resource is None:
            return None
        return self.resource.permissions


def decide(current: ResourceRef | None, desired: LinkedResource | None) -> Decision:
    current_id = current.id if current is not None else None

    if current_id is None:
        if desired is None:
            return Decision(action=LifecycleAction.NOOP)
        return Decision(action=LifecycleAction.CREATE, resource=desired)

    if desired is None:
        return Decision(action=LifecycleAction.DELETE, resource_id=current_id)

    return Decision(action=LifecycleAction.UPDATE, resource_id=current_id, resource=desired)
