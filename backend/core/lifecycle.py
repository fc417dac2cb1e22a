"""Active/Archived lifecycle and revisioning for parts and control plans.

These functions perform the transition unconditionally; asking the operator
for confirmation is left to the caller.
"""

from typing import TypeVar

from backend.core import logger
from backend.core.errors import InvalidState
from backend.models.common import LifecycleStatus, new_id
from backend.models.control_plan import ControlPlan
from backend.models.part import Part

Revisable = TypeVar("Revisable", Part, ControlPlan)


def archive(entity: Revisable) -> Revisable:
    """Active -> Archived. Already archived records are returned unchanged."""
    if entity.status is LifecycleStatus.ARCHIVED:
        return entity
    logger.info("Archiving %s %s", type(entity).__name__, entity.id)
    return entity.model_copy(update={"status": LifecycleStatus.ARCHIVED})


def restore(entity: Revisable) -> Revisable:
    """Archived -> Active. Already active records are returned unchanged."""
    if entity.status is LifecycleStatus.ACTIVE:
        return entity
    logger.info("Restoring %s %s", type(entity).__name__, entity.id)
    return entity.model_copy(update={"status": LifecycleStatus.ACTIVE})


def create_revision(entity: Revisable) -> tuple[Revisable, Revisable]:
    """Return ``(archived_original, new_revision)``.

    Both halves must be written to the store together.
    """
    if entity.status is not LifecycleStatus.ACTIVE:
        raise InvalidState(
            f"Cannot revise {type(entity).__name__.lower()} '{entity.name}': it is archived"
        )

    if isinstance(entity, Part):
        update = {"id": new_id("P"), "revision": entity.revision + 1}
    else:
        update = {"id": new_id("CP"), "version": entity.version + 1}
    update["status"] = LifecycleStatus.ACTIVE

    revised = entity.model_copy(update=update, deep=True)
    logger.info(
        "Created %s %s from %s (%s)",
        type(entity).__name__,
        revised.id,
        entity.id,
        _counter_label(revised),
    )
    return archive(entity), revised


def _counter_label(entity: Part | ControlPlan) -> str:
    if isinstance(entity, Part):
        return f"revision {entity.revision}"
    return f"version {entity.version}"
