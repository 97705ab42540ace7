"""Resolve the owners of the files modified by a change.

The resolution walks the OWNERS hierarchy of every modified file::

    All-Projects refs/meta/config OWNERS
      -> parent projects refs/meta/config OWNERS
        -> project refs/meta/config OWNERS
          -> <branch>:OWNERS
            -> <branch>:dir/OWNERS
              -> <branch>:dir/sub/OWNERS

Each level is applied on top of the previous one with
``PathOwnersEntry.from_config``. Matchers visible at a file's directory are
then tested against the file itself.
"""

import logging
from collections.abc import Iterable, Sequence
from enum import StrEnum

from pydantic import BaseModel

from path_owners import metrics
from path_owners.accounts import Accounts
from path_owners.blob import BlobReader, BlobReadError
from path_owners.cache import NoOpEntriesCache, PathOwnersEntriesCache
from path_owners.entry import EMPTY, PathOwnersEntry
from path_owners.exceptions import InvalidOwnersFileError, OwnersParseError
from path_owners.label import LabelDefinition
from path_owners.matcher import Matcher, MatcherLevel
from path_owners.owners_config import OWNERS_FILE, ConfigurationParser, OwnersConfig
from path_owners.owners_map import OwnersMap, OwnersMapBuilder
from path_owners.refs import REFS_CONFIG

logger = logging.getLogger(__name__)

COMMIT_MSG = "/COMMIT_MSG"
MERGE_LIST = "/MERGE_LIST"


class ChangeType(StrEnum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    RENAMED = "RENAMED"
    COPIED = "COPIED"
    REWRITE = "REWRITE"


class FileDiff(BaseModel, frozen=True):
    path: str
    old_path: str | None = None
    change_type: ChangeType = ChangeType.MODIFIED


def modified_paths(diffs: Iterable[FileDiff]) -> set[str]:
    """Paths needing approval: renamed files count with their old and new path."""
    paths: set[str] = set()
    for diff in diffs:
        if diff.path in {COMMIT_MSG, MERGE_LIST}:
            continue
        paths.add(diff.path)
        if diff.change_type == ChangeType.RENAMED and diff.old_path:
            paths.add(diff.old_path)
    return paths


class PathOwners:
    """The ownership resolution engine.

    One instance can serve many concurrent resolutions, all per-change state
    lives in the ``resolve`` call.

    Args:
        accounts: identity resolution
        blob_reader: reads OWNERS files from the repositories
        cache: parsed OWNERS files shared between resolutions
        config_ref: ref holding project level OWNERS files
    """

    def __init__(
        self,
        accounts: Accounts,
        blob_reader: BlobReader,
        cache: PathOwnersEntriesCache | None = None,
        config_ref: str = REFS_CONFIG,
    ) -> None:
        self._accounts = accounts
        self._blob_reader = blob_reader
        self._cache = cache or NoOpEntriesCache()
        self._config_ref = config_ref
        self._parser = ConfigurationParser(accounts)

    def resolve(
        self,
        project: str,
        branch: str | None,
        paths: Iterable[str],
        parent_projects: Sequence[str] = (),
        expand_groups: bool = True,
        global_label: LabelDefinition | None = None,
        strict: bool = False,
    ) -> OwnersMap:
        """Compute the owners of the modified files of a change.

        Args:
            project: project the change belongs to
            branch: target branch, None when OWNERS processing is disabled for it
            paths: modified file paths, see ``modified_paths``
            parent_projects: parent projects, nearest first, ending with the
                global configuration project
            expand_groups: whether consumers should present owners as accounts
                (group members included) or as written, see
                ``OwnersMap.expand_groups``
            global_label: label overriding the ones found in OWNERS files
            strict: raise instead of ignoring unreadable OWNERS files

        Returns:
            The owners map, empty for a disabled branch

        Raises:
            InvalidOwnersFileError: If ``strict`` and an OWNERS file cannot be
                read or parsed
        """
        if branch is None:
            logger.debug(
                f"OWNERS disabled for a branch of {project}",
                extra={"project": project},
            )
            return OwnersMap(expand_groups=expand_groups)

        with metrics.load_configuration.time():
            owners_map = self._resolve(
                project,
                branch,
                sorted(set(paths)),
                parent_projects,
                expand_groups,
                global_label,
                strict,
            )
        logger.debug(
            f"Resolved owners of {len(owners_map.file_owners)} files in {project}@{branch}",
            extra={"project": project, "branch": branch},
        )
        return owners_map

    def _resolve(
        self,
        project: str,
        branch: str,
        paths: list[str],
        parent_projects: Sequence[str],
        expand_groups: bool,
        global_label: LabelDefinition | None,
        strict: bool,
    ) -> OwnersMap:
        root = self._root_entry(project, branch, parent_projects, strict)
        entries: dict[str, PathOwnersEntry] = {}
        builder = OwnersMapBuilder()

        for path in paths:
            entry = self._path_entry(project, branch, path, root, entries, strict)

            builder.add_file_owners(path, entry.owners)
            builder.add_file_reviewers(path, entry.reviewers)
            builder.add_file_group_owners(path, entry.group_owners)
            if entry.owners_path is not None:
                builder.add_path_owners(entry.owners_path, entry.owners)
                builder.add_path_reviewers(entry.owners_path, entry.reviewers)
            builder.add_file_label(path, global_label or entry.label)

            for matcher in _matching(entry.matchers.values(), path):
                builder.add_matcher(matcher)
                builder.add_file_owners(path, matcher.owners)
                builder.add_file_reviewers(path, matcher.reviewers)
                builder.add_file_group_owners(path, matcher.group_owners)

        label = global_label
        if label is None:
            label = next(
                (builder.file_labels[p] for p in paths if p in builder.file_labels),
                None,
            )
        return builder.build(label, expand_groups)

    def _root_entry(
        self,
        project: str,
        branch: str,
        parent_projects: Sequence[str],
        strict: bool,
    ) -> PathOwnersEntry:
        entry = EMPTY
        for parent in reversed(parent_projects):
            entry = self._apply(parent, self._config_ref, OWNERS_FILE, entry, strict)
        entry = self._apply(project, self._config_ref, OWNERS_FILE, entry, strict)
        return self._apply(project, branch, OWNERS_FILE, entry, strict)

    def _path_entry(
        self,
        project: str,
        branch: str,
        path: str,
        root: PathOwnersEntry,
        entries: dict[str, PathOwnersEntry],
        strict: bool,
    ) -> PathOwnersEntry:
        """Entry of the directory holding ``path``.

        ``entries`` memoizes the entry of every directory prefix (``dir/``,
        ``dir/sub/``) seen during one resolution.
        """
        entry = root
        prefix = ""
        for part in path.split("/")[:-1]:
            prefix += f"{part}/"
            if prefix not in entries:
                entries[prefix] = self._apply(
                    project, branch, prefix + OWNERS_FILE, entry, strict
                )
            entry = entries[prefix]
        return entry

    def _apply(
        self,
        project: str,
        branch: str,
        owners_path: str,
        parent: PathOwnersEntry,
        strict: bool,
    ) -> PathOwnersEntry:
        config = self._get_config(project, branch, owners_path, strict)
        if config is None:
            return parent
        return PathOwnersEntry.from_config(owners_path, config, self._accounts, parent)

    def _get_config(
        self, project: str, branch: str, owners_path: str, strict: bool
    ) -> OwnersConfig | None:
        try:
            return self._cache.get(
                project,
                branch,
                owners_path,
                lambda: self._load_config(project, branch, owners_path),
            )
        except InvalidOwnersFileError as e:
            if strict:
                raise
            logger.warning(
                f"Ignoring {owners_path}: {e.__cause__ or e}",
                extra={"project": project, "branch": branch, "owners_path": owners_path},
            )
            return None

    def _load_config(
        self, project: str, branch: str, owners_path: str
    ) -> OwnersConfig | None:
        metrics.configuration_loads.inc()
        try:
            content = self._blob_reader.get(project, branch, owners_path)
            if content is None:
                return None
            return self._parser.parse(content)
        except (BlobReadError, OwnersParseError) as e:
            raise InvalidOwnersFileError(project, owners_path, branch) from e

def _matching(matchers: Iterable[Matcher], path: str) -> list[Matcher]:
    """Matchers applying to ``path``, from the most specific level matching it.

    Exact and suffix matchers come first, then regular expressions, then the
    ``.*`` catch-all. All matchers of the first level with a match apply.
    """
    by_level: dict[MatcherLevel, list[Matcher]] = {}
    for matcher in matchers:
        if matcher.matches(path):
            by_level.setdefault(matcher.level, []).append(matcher)
    for level in MatcherLevel:
        if level in by_level:
            return by_level[level]
    return []
