"""Path based code ownership from OWNERS files.

Resolves which accounts own the files modified by a change, following the
OWNERS files of the repository hierarchy, and checks whether the recorded
votes satisfy those owners.

Example:
    >>> from path_owners import AccountRegistry, GitBlobReader, PathOwners
    >>> engine = PathOwners(
    ...     accounts=AccountRegistry(accounts, groups),
    ...     blob_reader=GitBlobReader({"my-project": "/srv/git/my-project.git"}),
    ... )
    >>> owners_map = engine.resolve("my-project", "master", {"src/app.py"})
    >>> owners_map.file_owners["src/app.py"]
"""

from path_owners.accounts import Account, AccountRegistry, Accounts, Group
from path_owners.approvals import (
    Approval,
    ApprovalStatus,
    OwnersSubmitRequirement,
)
from path_owners.blob import BlobReader, GitBlobReader, VCSBlobReader
from path_owners.cache import (
    NoOpEntriesCache,
    PathOwnersEntriesCache,
    TTLEntriesCache,
    create_entries_cache,
)
from path_owners.exceptions import (
    InvalidOwnersFileError,
    LabelNotFoundError,
    OwnersError,
)
from path_owners.label import LabelDefinition, LabelFunction, LabelType, LabelTypes
from path_owners.listener import OwnersRefUpdateListener, RefUpdatedEvent
from path_owners.owners_map import OwnersMap
from path_owners.resolver import ChangeType, FileDiff, PathOwners, modified_paths

__all__ = [
    "Account",
    "AccountRegistry",
    "Accounts",
    "Approval",
    "ApprovalStatus",
    "BlobReader",
    "ChangeType",
    "FileDiff",
    "GitBlobReader",
    "Group",
    "InvalidOwnersFileError",
    "LabelDefinition",
    "LabelFunction",
    "LabelNotFoundError",
    "LabelType",
    "LabelTypes",
    "NoOpEntriesCache",
    "OwnersError",
    "OwnersMap",
    "OwnersRefUpdateListener",
    "OwnersSubmitRequirement",
    "PathOwners",
    "PathOwnersEntriesCache",
    "RefUpdatedEvent",
    "TTLEntriesCache",
    "VCSBlobReader",
    "create_entries_cache",
    "modified_paths",
]
