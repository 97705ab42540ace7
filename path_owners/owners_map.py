"""Result of resolving the owners of a change."""

import logging
from collections import defaultdict
from collections.abc import Iterable

from pydantic import BaseModel, Field

from path_owners.accounts import AccountId
from path_owners.exceptions import MatcherMergeError
from path_owners.label import LabelDefinition
from path_owners.matcher import Matcher

logger = logging.getLogger(__name__)


class OwnersMap(BaseModel, frozen=True):
    """Owners of a change, per OWNERS file and per modified file.

    Per-file maps only contain files with at least one owner (reviewer, group
    owner); a file missing from ``file_owners`` requires no approval.
    ``file_owners`` always includes the members of group owners, whatever
    ``expand_groups`` says.
    """

    path_owners: dict[str, frozenset[AccountId]] = Field(
        default_factory=dict,
        description="OWNERS file path to the owners it declares (inherited included)",
    )
    path_reviewers: dict[str, frozenset[AccountId]] = Field(default_factory=dict)
    matchers: dict[str, Matcher] = Field(
        default_factory=dict,
        description="Matchers that match at least one modified file",
    )
    file_owners: dict[str, frozenset[AccountId]] = Field(default_factory=dict)
    file_reviewers: dict[str, frozenset[AccountId]] = Field(default_factory=dict)
    file_group_owners: dict[str, frozenset[str]] = Field(default_factory=dict)
    file_labels: dict[str, LabelDefinition] = Field(
        default_factory=dict,
        description="Label required for each modified file, if any",
    )
    label: LabelDefinition | None = Field(
        default=None,
        description="Global label, else the label of the first labelled file",
    )
    expand_groups: bool = Field(
        default=True,
        description="Present owners as accounts (file_owners) rather than as "
        "written (file_group_owners)",
    )

    def label_for(self, path: str) -> LabelDefinition | None:
        return self.file_labels.get(path)


class OwnersMapBuilder:
    """Accumulates ownership while walking the modified files of a change."""

    def __init__(self) -> None:
        self.path_owners: dict[str, set[AccountId]] = defaultdict(set)
        self.path_reviewers: dict[str, set[AccountId]] = defaultdict(set)
        self.matchers: dict[str, Matcher] = {}
        self.file_owners: dict[str, set[AccountId]] = defaultdict(set)
        self.file_reviewers: dict[str, set[AccountId]] = defaultdict(set)
        self.file_group_owners: dict[str, set[str]] = defaultdict(set)
        self.file_labels: dict[str, LabelDefinition] = {}

    def add_path_owners(self, owners_path: str, owners: Iterable[AccountId]) -> None:
        self.path_owners[owners_path].update(owners)

    def add_path_reviewers(
        self, owners_path: str, reviewers: Iterable[AccountId]
    ) -> None:
        self.path_reviewers[owners_path].update(reviewers)

    def add_file_owners(self, path: str, owners: Iterable[AccountId]) -> None:
        self.file_owners[path].update(owners)

    def add_file_reviewers(self, path: str, reviewers: Iterable[AccountId]) -> None:
        self.file_reviewers[path].update(reviewers)

    def add_file_group_owners(self, path: str, group_owners: Iterable[str]) -> None:
        self.file_group_owners[path].update(group_owners)

    def add_matcher(self, matcher: Matcher) -> None:
        """Keep a matcher that matched a modified file.

        Matchers with the same key coming from different directories are
        merged, the first one wins if their variants differ.
        """
        try:
            self.matchers[matcher.pattern] = matcher.merge(
                self.matchers.get(matcher.pattern)
            )
        except MatcherMergeError as e:
            logger.warning(f"Keeping the first matcher for key {matcher.pattern}: {e}")

    def add_file_label(self, path: str, label: LabelDefinition | None) -> None:
        if label is not None:
            self.file_labels[path] = label

    def build(
        self, label: LabelDefinition | None, expand_groups: bool = True
    ) -> OwnersMap:
        return OwnersMap(
            path_owners=_freeze(self.path_owners),
            path_reviewers=_freeze(self.path_reviewers),
            matchers=dict(self.matchers),
            file_owners=_freeze(self.file_owners),
            file_reviewers=_freeze(self.file_reviewers),
            file_group_owners=_freeze(self.file_group_owners),
            file_labels=dict(self.file_labels),
            label=label,
            expand_groups=expand_groups,
        )


def _freeze[T](mapping: dict[str, set[T]]) -> dict[str, frozenset[T]]:
    return {key: frozenset(values) for key, values in mapping.items() if values}
