"""Invalidate cached OWNERS files when refs are updated."""

import logging

from pydantic import BaseModel

from path_owners.cache import PathOwnersEntriesCache
from path_owners.refs import REFS_CONFIG, is_host_internal_ref

logger = logging.getLogger(__name__)


class RefUpdatedEvent(BaseModel, frozen=True):
    project: str
    ref: str
    old_object_id: str | None = None
    new_object_id: str | None = None


def supported_event(all_users: str, event: RefUpdatedEvent) -> bool:
    """Only the project config ref and branches can hold OWNERS files."""
    return event.project != all_users and (
        event.ref == REFS_CONFIG or not is_host_internal_ref(event.ref)
    )


class OwnersRefUpdateListener:
    """Drops cached OWNERS files of a branch once that branch moves.

    Args:
        cache: the shared OWNERS cache
        all_users: name of the project holding user data
    """

    def __init__(self, cache: PathOwnersEntriesCache, all_users: str) -> None:
        self._cache = cache
        self._all_users = all_users

    def on_ref_updated(self, event: RefUpdatedEvent) -> None:
        if not supported_event(self._all_users, event):
            return
        logger.debug(
            f"Ref {event.ref} of {event.project} updated, invalidating OWNERS cache",
            extra={"project": event.project, "branch": event.ref},
        )
        self._cache.invalidate(event.project, event.ref)
