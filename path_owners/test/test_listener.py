from unittest.mock import create_autospec

import pytest

from path_owners.cache import TTLEntriesCache
from path_owners.listener import (
    OwnersRefUpdateListener,
    RefUpdatedEvent,
    supported_event,
)


@pytest.mark.parametrize(
    "project, ref, expected",
    [
        ("p", "refs/heads/master", True),
        ("p", "refs/heads/feature/x", True),
        ("p", "refs/meta/config", True),
        ("p", "refs/tags/v1.0", True),
        ("p", "refs/changes/01/1/1", False),
        ("p", "refs/changes/01/1/meta", False),
        ("p", "refs/sequences/changes", False),
        ("p", "refs/meta/external-ids", False),
        ("p", "refs/meta/group-names", False),
        ("p", "refs/users/01/1000001", False),
        ("p", "refs/groups/ab/abc123", False),
        ("p", "refs/draft-comments/01/1/1000001", False),
        ("p", "refs/starred-changes/01/1/1000001", False),
        ("p", "refs/cache-automerge/ab/cdef", False),
        ("All-Users", "refs/heads/master", False),
        ("All-Users", "refs/meta/config", False),
    ],
)
def test_supported_event(project: str, ref: str, expected: bool) -> None:
    event = RefUpdatedEvent(project=project, ref=ref)
    assert supported_event("All-Users", event) is expected


def test_listener_invalidates_branch() -> None:
    cache = create_autospec(TTLEntriesCache, instance=True)
    listener = OwnersRefUpdateListener(cache, "All-Users")

    listener.on_ref_updated(
        RefUpdatedEvent(
            project="p",
            ref="refs/heads/master",
            old_object_id="a" * 40,
            new_object_id="b" * 40,
        )
    )

    cache.invalidate.assert_called_once_with("p", "refs/heads/master")


def test_listener_ignores_unsupported_refs() -> None:
    cache = create_autospec(TTLEntriesCache, instance=True)
    listener = OwnersRefUpdateListener(cache, "All-Users")

    listener.on_ref_updated(RefUpdatedEvent(project="p", ref="refs/changes/01/1/1"))
    listener.on_ref_updated(RefUpdatedEvent(project="All-Users", ref="refs/heads/x"))

    cache.invalidate.assert_not_called()


def test_listener_drops_cached_owners() -> None:
    cache = TTLEntriesCache()
    cache.get("p", "master", "OWNERS", lambda: "old")
    listener = OwnersRefUpdateListener(cache, "All-Users")

    listener.on_ref_updated(RefUpdatedEvent(project="p", ref="refs/heads/master"))

    assert cache.get("p", "master", "OWNERS", lambda: "new") == "new"
