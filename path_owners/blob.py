"""Read OWNERS file content from a repository at a given revision.

The engine only depends on the ``BlobReader`` protocol. Two adapters are
provided: ``GitBlobReader`` for a local repository and ``VCSBlobReader`` for
remote API clients exposing ``get_file(path, ref)``.
"""

import logging
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)

REGULAR_FILE_MODES = {"100644", "100755"}


class BlobReadError(Exception):
    """The repository could not be read (as opposed to a missing file)."""


class BlobReader(Protocol):
    """Protocol for reading a file at a revision."""

    def get(self, project: str, revision: str, path: str) -> bytes | None:
        """Fetch the content of a regular file.

        Args:
            project: repository handle
            revision: branch name, ref name or commit SHA
            path: file path relative to the repository root

        Returns:
            File content, or None for an unknown revision, a missing path or a
            path that is not a regular file

        Raises:
            BlobReadError: If the repository itself cannot be accessed
        """
        ...


class GitBlobReader:
    """Reads blobs from local git repositories using the git executable.

    Args:
        repositories: project name to working directory (or bare repository) path
    """

    def __init__(self, repositories: dict[str, str]) -> None:
        self._repositories = repositories

    def get(self, project: str, revision: str, path: str) -> bytes | None:
        wd = self._repositories.get(project)
        if wd is None:
            raise BlobReadError(f"Unknown project {project}")

        cmd = ["git", "ls-tree", revision, "--", path]
        try:
            result = subprocess.run(
                cmd, cwd=wd, capture_output=True, text=True, check=False
            )
        except OSError as e:
            raise BlobReadError(f"git ls-tree failed in {wd}: {e}") from e
        if result.returncode != 0:
            # unknown revision
            logger.debug(f"git ls-tree {revision} failed: {result.stderr.strip()}")
            return None

        line = result.stdout.strip()
        if not line:
            return None
        # <mode> SP <type> SP <object> TAB <file>
        meta, _ = line.split("\t", 1)
        mode, object_type, sha = meta.split()
        if object_type != "blob" or mode not in REGULAR_FILE_MODES:
            return None

        cmd = ["git", "cat-file", "blob", sha]
        result_blob = subprocess.run(cmd, cwd=wd, capture_output=True, check=False)
        if result_blob.returncode != 0:
            raise BlobReadError(f"git cat-file failed for {sha} in {wd}")
        return result_blob.stdout


class VCSFileClient(Protocol):
    def get_file(self, path: str, ref: str) -> str | bytes | None: ...


class VCSBlobReader:
    """Adapts VCS API clients (GitHub, GitLab, ...) to ``BlobReader``.

    Args:
        clients: project name to API client
    """

    def __init__(self, clients: dict[str, VCSFileClient]) -> None:
        self._clients = clients

    def get(self, project: str, revision: str, path: str) -> bytes | None:
        client = self._clients.get(project)
        if client is None:
            raise BlobReadError(f"Unknown project {project}")
        content = client.get_file(path=path, ref=revision)
        if content is None:
            return None
        if isinstance(content, str):
            return content.encode()
        return content
