"""Effective ownership state of one directory level."""

import logging
from typing import Self

from pydantic import BaseModel, Field

from path_owners.accounts import Accounts, AccountId, strip_owner_domain
from path_owners.exceptions import MatcherMergeError
from path_owners.label import LabelDefinition
from path_owners.matcher import Matcher
from path_owners.owners_config import OwnersConfig

logger = logging.getLogger(__name__)


class PathOwnersEntry(BaseModel, frozen=True):
    """Owners, reviewers and matchers that apply at a directory.

    Entries are built once per directory, from the directory's OWNERS file and
    the entry of the closest ancestor, and never change afterwards.
    """

    owners_path: str | None = Field(
        default=None,
        description="OWNERS file that produced this entry, None for the empty root",
    )
    owners: frozenset[AccountId] = Field(default_factory=frozenset)
    reviewers: frozenset[AccountId] = Field(default_factory=frozenset)
    group_owners: frozenset[str] = Field(
        default_factory=frozenset,
        description="Owners in display form, groups unexpanded",
    )
    matchers: dict[str, Matcher] = Field(default_factory=dict)
    inherited: bool = True
    label: LabelDefinition | None = None

    @classmethod
    def from_config(
        cls,
        owners_path: str,
        config: OwnersConfig,
        accounts: Accounts,
        parent: "PathOwnersEntry",
    ) -> Self:
        """Apply an OWNERS file on top of the parent directory entry.

        With ``inherited: true`` the parent's owners, reviewers and matchers
        are kept and the parent's label is used unless the file sets one.
        With ``inherited: false`` only the file itself counts.

        Args:
            owners_path: path of the OWNERS file, e.g. ``dir/OWNERS``
            config: the parsed OWNERS file
            accounts: identity resolution
            parent: entry of the closest ancestor directory
        """
        owners = _resolve(accounts, set(config.owners))
        reviewers = _resolve(accounts, set(config.reviewers))
        group_owners = {strip_owner_domain(o) for o in config.owners}
        matchers = dict(config.matchers)

        if not config.inherited:
            return cls(
                owners_path=owners_path,
                owners=frozenset(owners),
                reviewers=frozenset(reviewers),
                group_owners=frozenset(group_owners),
                matchers=matchers,
                inherited=False,
                label=config.label,
            )

        for key, inherited_matcher in parent.matchers.items():
            own = matchers.get(key)
            try:
                matchers[key] = inherited_matcher.merge(own)
            except MatcherMergeError as e:
                logger.warning(
                    f"{owners_path}: matcher overrides an inherited matcher "
                    f"of a different kind, keeping the local one: {e}",
                    extra={"owners_path": owners_path},
                )

        return cls(
            owners_path=owners_path,
            owners=frozenset(owners | parent.owners),
            reviewers=frozenset(reviewers | parent.reviewers),
            group_owners=frozenset(group_owners | parent.group_owners),
            matchers=matchers,
            inherited=True,
            label=config.label or parent.label,
        )


EMPTY = PathOwnersEntry()


def _resolve(accounts: Accounts, identities: set[str]) -> set[AccountId]:
    resolved: set[AccountId] = set()
    for identity in identities:
        found = accounts.find(identity)
        if not found:
            logger.warning(
                f"Owner '{identity}' does not resolve to any account, ignoring it",
                extra={"identity": identity},
            )
        resolved.update(found)
    return resolved
