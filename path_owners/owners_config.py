"""OWNERS file model and parser.

OWNERS file format::

    inherited: true
    label: Code-Review,2
    owners:
      - alice@example.com
      - group/Maintainers
    reviewers:
      - bob
    matchers:
      - suffix: .sql
        owners: [dba@example.com]
"""

import logging
import re

from pydantic import BaseModel, Field
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from path_owners.accounts import Accounts, AccountId, strip_owner_domain
from path_owners.exceptions import MatcherMergeError, OwnersParseError
from path_owners.label import LabelDefinition
from path_owners.matcher import Matcher, MatcherKind, compile_pattern

logger = logging.getLogger(__name__)

OWNERS_FILE = "OWNERS"

# inspection order for the matcher keys of a matchers entry
MATCHER_KINDS = (
    MatcherKind.SUFFIX,
    MatcherKind.REGEX,
    MatcherKind.PARTIAL_REGEX,
    MatcherKind.EXACT,
)


class OwnersConfig(BaseModel, frozen=True):
    """Parsed content of one OWNERS file.

    Owners and reviewers are kept as written; they are resolved to accounts
    when the file is applied to a directory.
    """

    inherited: bool = Field(
        default=True,
        description="Whether owners and matchers of parent directories still apply",
    )
    owners: frozenset[str] = Field(default_factory=frozenset)
    reviewers: frozenset[str] = Field(default_factory=frozenset)
    matchers: dict[str, Matcher] = Field(
        default_factory=dict,
        description="Matchers by pattern",
    )
    label: LabelDefinition | None = None


def _as_string_set(value: object) -> set[str]:
    """Owners may be given as a single scalar or as a list."""
    if value is None:
        return set()
    if isinstance(value, list):
        return {str(item) for item in value if item is not None}
    if isinstance(value, dict):
        return set()
    return {str(value)}


class ConfigurationParser:
    """Turns raw OWNERS bytes into an ``OwnersConfig``.

    Matcher owners are resolved through ``accounts`` while parsing, so that
    matchers without any valid owner can be dropped early.
    """

    def __init__(self, accounts: Accounts) -> None:
        self._accounts = accounts
        self._yaml = YAML(typ="safe", pure=True)

    def get_owners_config(self, content: bytes | None) -> OwnersConfig | None:
        """Parse an OWNERS file.

        Args:
            content: raw file content, None if the file does not exist

        Returns:
            The parsed configuration, or None when the file is absent or
            cannot be parsed
        """
        if content is None:
            return None
        try:
            return self.parse(content)
        except OwnersParseError as e:
            logger.warning(f"Unable to read YAML Owners file: {e}")
            return None

    def parse(self, content: bytes) -> OwnersConfig:
        """Parse an existing OWNERS file.

        Invalid elements inside a valid document are dropped with a warning.

        Raises:
            OwnersParseError: If the content is not a YAML dictionary
        """
        try:
            document = self._yaml.load(content.decode())
        except (YAMLError, UnicodeDecodeError) as e:
            raise OwnersParseError(str(e)) from e

        if document is None:
            raise OwnersParseError("empty OWNERS file")
        if not isinstance(document, dict):
            raise OwnersParseError("OWNERS file content is not a dictionary")

        inherited = document.get("inherited", True)
        if not isinstance(inherited, bool):
            logger.warning(f"Ignoring non boolean 'inherited' value {inherited!r}")
            inherited = True

        label = None
        raw_label = document.get("label")
        if raw_label is not None:
            label = LabelDefinition.parse(str(raw_label))

        return OwnersConfig(
            inherited=inherited,
            owners=frozenset(_as_string_set(document.get("owners"))),
            reviewers=frozenset(_as_string_set(document.get("reviewers"))),
            matchers=self._get_matchers(document.get("matchers")),
            label=label,
        )

    def _get_matchers(self, node: object) -> dict[str, Matcher]:
        matchers: dict[str, Matcher] = {}
        if node is None:
            return matchers
        if not isinstance(node, list):
            logger.warning(f"Ignoring 'matchers' section, not a list: {node!r}")
            return matchers

        for element in node:
            matcher = self._to_matcher(element)
            if matcher is None:
                continue
            try:
                matchers[matcher.pattern] = matcher.merge(matchers.get(matcher.pattern))
            except MatcherMergeError as e:
                logger.warning(f"Ignoring duplicated matcher key: {e}")
        return matchers

    def _to_matcher(self, element: object) -> Matcher | None:
        if not isinstance(element, dict):
            logger.warning(f"Ignoring invalid element {element!r}")
            return None

        kind = next((k for k in MATCHER_KINDS if element.get(k.value) is not None), None)
        if kind is None:
            logger.warning(f"Ignoring invalid element {element!r}")
            return None
        pattern = str(element[kind.value])
        if kind in {MatcherKind.REGEX, MatcherKind.PARTIAL_REGEX}:
            try:
                compile_pattern(pattern)
            except re.error as e:
                logger.warning(
                    f"Ignoring {kind} matcher with invalid pattern {pattern!r}: {e}"
                )
                return None

        raw_owners = _as_string_set(element.get("owners"))
        if not raw_owners:
            logger.warning(f"Ignoring {kind} matcher '{pattern}' without owners")
            return None

        owners = self._resolve(raw_owners)
        if not owners:
            logger.warning(
                f"Ignoring {kind} matcher '{pattern}': none of its owners "
                f"{sorted(raw_owners)} resolves to an account"
            )
            return None

        return Matcher(
            kind=kind,
            pattern=pattern,
            owners=frozenset(owners),
            reviewers=frozenset(self._resolve(_as_string_set(element.get("reviewers")))),
            group_owners=frozenset(strip_owner_domain(o) for o in raw_owners),
        )

    def _resolve(self, identities: set[str]) -> set[AccountId]:
        resolved: set[AccountId] = set()
        for identity in identities:
            resolved.update(self._accounts.find(identity))
        return resolved
