"""Path matchers declared in the ``matchers`` section of OWNERS files."""

import functools
import re
from enum import Enum, StrEnum

from pydantic import BaseModel, Field

from path_owners.accounts import AccountId
from path_owners.exceptions import MatcherMergeError

CATCH_ALL_PATTERN = ".*"


class MatcherKind(StrEnum):
    """Matcher variants, named after their key in the OWNERS file."""

    EXACT = "exact"
    SUFFIX = "suffix"
    REGEX = "regex"
    PARTIAL_REGEX = "partial_regex"


class MatcherLevel(Enum):
    """Precedence tier when several matchers apply to the same file."""

    REGULAR = 0
    FALLBACK = 1
    CATCH_ALL = 2


@functools.lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


class Matcher(BaseModel, frozen=True):
    """A path predicate with its own owners.

    The matcher key (``pattern``) is unique per OWNERS file; matchers with the
    same key found at different directory levels are combined with ``merge``.
    """

    kind: MatcherKind
    pattern: str
    owners: frozenset[AccountId] = Field(default_factory=frozenset)
    reviewers: frozenset[AccountId] = Field(default_factory=frozenset)
    group_owners: frozenset[str] = Field(
        default_factory=frozenset,
        description="Owners as written in the OWNERS file, groups unexpanded",
    )

    def matches(self, path: str) -> bool:
        match self.kind:
            case MatcherKind.EXACT:
                return path == self.pattern
            case MatcherKind.SUFFIX:
                return path.endswith(self.pattern)
            case MatcherKind.REGEX:
                return compile_pattern(self.pattern).fullmatch(path) is not None
            case MatcherKind.PARTIAL_REGEX:
                return compile_pattern(self.pattern).search(path) is not None

    @property
    def level(self) -> MatcherLevel:
        if self.kind in {MatcherKind.EXACT, MatcherKind.SUFFIX}:
            return MatcherLevel.REGULAR
        if self.pattern == CATCH_ALL_PATTERN:
            return MatcherLevel.CATCH_ALL
        return MatcherLevel.FALLBACK

    def merge(self, other: "Matcher | None") -> "Matcher":
        """Union of owners, reviewers and group owners of two matchers.

        Raises:
            MatcherMergeError: If the matchers differ in key or variant
        """
        if other is None:
            return self
        if other.pattern != self.pattern or other.kind != self.kind:
            raise MatcherMergeError(
                f"Cannot merge {self.kind} matcher '{self.pattern}' "
                f"with {other.kind} matcher '{other.pattern}'"
            )
        return self.model_copy(
            update={
                "owners": self.owners | other.owners,
                "reviewers": self.reviewers | other.reviewers,
                "group_owners": self.group_owners | other.group_owners,
            }
        )
