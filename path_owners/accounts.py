"""Identity resolution for OWNERS entries.

OWNERS files reference people by email, username or full name, and groups
with the ``group/`` prefix. The engine only depends on the ``Accounts``
protocol; ``AccountRegistry`` is an in-process implementation backed by
plain account and group records.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

GROUP_PREFIX = "group/"

AccountId = int


def is_group(identity: str) -> bool:
    return identity.startswith(GROUP_PREFIX)


def strip_owner_domain(identity: str) -> str:
    """Display form of an owner: groups verbatim, ``user@domain`` as ``user``."""
    if is_group(identity):
        return identity
    return identity.split("@", 1)[0]


class Accounts(Protocol):
    """Protocol for the host identity resolution system."""

    def find(self, identity: str) -> set[AccountId]:
        """Resolve an OWNERS identity to account ids.

        Args:
            identity: email, username, full name or ``group/<name>``

        Returns:
            Matching active account ids, empty if nothing matched
        """
        ...


class Account(BaseModel, frozen=True):
    """A user account known to the host."""

    id: AccountId = Field(..., description="Numeric account id")
    username: str | None = Field(default=None, description="Login name")
    full_name: str | None = Field(default=None, description="Display name")
    emails: list[str] = Field(
        default_factory=list,
        description="Email addresses, the first one is the preferred email",
    )
    active: bool = Field(default=True, description="Inactive accounts never own files")

    def matches(self, identity: str) -> bool:
        if self.username is not None and self.username == identity:
            return True
        if any(email.lower() == identity.lower() for email in self.emails):
            return True
        return (
            self.full_name is not None
            and self.full_name.strip().lower() == identity.strip().lower()
        )


class Group(BaseModel, frozen=True):
    """A group of accounts, possibly including other groups."""

    name: str
    uuid: str | None = None
    members: list[AccountId] = Field(default_factory=list)
    subgroups: list[str] = Field(
        default_factory=list,
        description="Names or UUIDs of included groups",
    )


class AccountRegistry:
    """Resolves identities against a fixed set of accounts and groups.

    Args:
        accounts: known accounts
        groups: known groups
    """

    def __init__(
        self, accounts: Iterable[Account] = (), groups: Iterable[Group] = ()
    ) -> None:
        self._accounts = {account.id: account for account in accounts}
        self._groups: dict[str, Group] = {}
        for group in groups:
            self._groups[group.name] = group
            if group.uuid:
                self._groups[group.uuid] = group

    def find(self, identity: str) -> set[AccountId]:
        if is_group(identity):
            return self._find_accounts_in_group(identity.removeprefix(GROUP_PREFIX))
        return self._find_user_or_email(identity)

    def _find_accounts_in_group(self, name_or_uuid: str) -> set[AccountId]:
        group = self._groups.get(name_or_uuid)
        if group is None:
            logger.warning(f"Group {name_or_uuid} was not found")
            return set()

        members: set[AccountId] = set()
        seen: set[str] = set()
        pending = [group]
        while pending:
            current = pending.pop()
            if current.name in seen:
                continue
            seen.add(current.name)
            members.update(
                account_id
                for account_id in current.members
                if self._is_active(account_id)
            )
            for subgroup in current.subgroups:
                if subgroup in self._groups:
                    pending.append(self._groups[subgroup])
                else:
                    logger.warning(
                        f"Group {subgroup} included by {current.name} was not found"
                    )
        return members

    def _find_user_or_email(self, identity: str) -> set[AccountId]:
        matching = [
            account for account in self._accounts.values() if account.matches(identity)
        ]
        if not matching:
            logger.warning(
                f"User '{identity}' does not resolve to any account",
                extra={"identity": identity},
            )
            return set()

        active = {account.id for account in matching if account.active}
        if not active:
            logger.warning(
                f"User '{identity}' resolves to {len(matching)} accounts, "
                "but none of them are active",
                extra={"identity": identity},
            )
        return active

    def _is_active(self, account_id: AccountId) -> bool:
        account = self._accounts.get(account_id)
        return account is not None and account.active
