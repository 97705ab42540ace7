import subprocess
from pathlib import Path

from path_owners.blob import BlobReadError

ALICE = 1
BOB = 2
CAROL = 3
DAVE = 4
EVE = 5


class InMemoryBlobReader:
    """OWNERS files by (project, revision, path)."""

    def __init__(self) -> None:
        self.files: dict[tuple[str, str, str], bytes] = {}
        self.broken: set[tuple[str, str, str]] = set()
        self.reads: list[tuple[str, str, str]] = []

    def add(
        self, path: str, content: str, project: str = "p", revision: str = "master"
    ) -> None:
        self.files[project, revision, path] = content.encode()

    def get(self, project: str, revision: str, path: str) -> bytes | None:
        key = (project, revision, path)
        self.reads.append(key)
        if key in self.broken:
            raise BlobReadError(f"cannot read {path}")
        return self.files.get(key)


def git(cwd: Path, *args: str) -> str:
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout.strip()


def init_repository(path: Path, files: dict[str, str]) -> Path:
    """Git repository with a single commit on master holding ``files``."""
    git(path, "init", "-q", "-b", "master")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "user.name", "Test")
    git(path, "config", "commit.gpgsign", "false")
    for name, content in files.items():
        (path / name).parent.mkdir(parents=True, exist_ok=True)
        (path / name).write_text(content)
    git(path, "add", "-A")
    git(path, "commit", "-q", "-m", "initial")
    return path
