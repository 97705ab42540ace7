import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

import path_owners.cli as path_owners_cli
from path_owners.test.fixtures import ALICE, BOB, CAROL, init_repository

ACCOUNTS = """
accounts:
  - id: 1
    username: alice
    emails: [alice@example.com]
  - id: 2
    username: bob
  - id: 3
    username: carol
groups:
  - name: Maintainers
    members: [2, 3]
labels:
  - name: Code-Review
    values: {-2: Rejected, -1: No, 0: None, 1: Ok, 2: Approved}
  - name: Verified
    values: {-1: Fails, 0: None, 1: Verified}
    function: NoBlock
"""


@pytest.fixture(autouse=True)
def root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def repository(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    return init_repository(
        repo,
        {
            "OWNERS": "owners: [alice]\n",
            "ci/OWNERS": "label: Verified\nowners: [group/Maintainers]\n",
        },
    )


@pytest.fixture
def accounts_file(tmp_path: Path) -> Path:
    path = tmp_path / "accounts.yaml"
    path.write_text(ACCOUNTS)
    return path


def base_args(repository: Path, accounts_file: Path) -> list[str]:
    return [
        "--repo",
        str(repository),
        "--project",
        "p",
        "--branch",
        "master",
        "--accounts",
        str(accounts_file),
    ]


def test_help() -> None:
    result = CliRunner().invoke(path_owners_cli.root, "--help")
    assert result.exit_code == 0
    assert "resolve" in result.output


def test_resolve(repository: Path, accounts_file: Path) -> None:
    result = CliRunner().invoke(
        path_owners_cli.root,
        ["resolve", *base_args(repository, accounts_file), "a.txt", "ci/job.yml", "/COMMIT_MSG"],
    )

    assert result.exit_code == 0, result.output
    owners_map = json.loads(result.stdout)
    assert set(owners_map["file_owners"]) == {"a.txt", "ci/job.yml"}
    assert owners_map["file_owners"]["a.txt"] == [ALICE]
    assert sorted(owners_map["file_owners"]["ci/job.yml"]) == [ALICE, BOB, CAROL]
    assert owners_map["file_labels"]["ci/job.yml"] == {"name": "Verified", "score": None}


def test_resolve_no_expand_groups(repository: Path, accounts_file: Path) -> None:
    result = CliRunner().invoke(
        path_owners_cli.root,
        [
            "resolve",
            *base_args(repository, accounts_file),
            "--no-expand-groups",
            "ci/job.yml",
        ],
    )

    assert result.exit_code == 0, result.output
    owners_map = json.loads(result.stdout)
    assert owners_map["expand_groups"] is False
    # group members still own the file
    assert sorted(owners_map["file_owners"]["ci/job.yml"]) == [ALICE, BOB, CAROL]
    assert sorted(owners_map["file_group_owners"]["ci/job.yml"]) == [
        "alice",
        "group/Maintainers",
    ]


def test_check_ok(repository: Path, accounts_file: Path) -> None:
    result = CliRunner().invoke(
        path_owners_cli.root,
        [
            "check",
            *base_args(repository, accounts_file),
            "--uploader",
            "3",
            "--vote",
            "1:Code-Review:2",
            "--vote",
            "2:Verified:1",
            "a.txt",
            "ci/job.yml",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Approved by owners" in result.output


def test_check_not_ready(repository: Path, accounts_file: Path) -> None:
    result = CliRunner().invoke(
        path_owners_cli.root,
        [
            "check",
            *base_args(repository, accounts_file),
            "--uploader",
            "3",
            "--vote",
            "1:Code-Review:1",
            "a.txt",
            "ci/job.yml",
        ],
    )

    assert result.exit_code == 1
    assert "Missing approvals for path(s): [a.txt, ci/job.yml]" in result.output


def test_check_invalid_vote(repository: Path, accounts_file: Path) -> None:
    result = CliRunner().invoke(
        path_owners_cli.root,
        [
            "check",
            *base_args(repository, accounts_file),
            "--uploader",
            "3",
            "--vote",
            "alice:Code-Review",
            "a.txt",
        ],
    )

    assert result.exit_code == 2
    assert "invalid vote" in result.output


def test_parse_vote() -> None:
    approval = path_owners_cli.parse_vote("1000001:Code-Review:-2")
    assert approval.account_id == 1000001
    assert approval.label == "Code-Review"
    assert approval.value == -2


def test_resolve_invalid_parent(repository: Path, accounts_file: Path) -> None:
    result = CliRunner().invoke(
        path_owners_cli.root,
        ["resolve", *base_args(repository, accounts_file), "--parent", "All-Projects", "a.txt"],
    )

    assert result.exit_code == 2
    assert "expected NAME=DIR" in result.output


def test_check_group_member_vote_without_expansion(
    repository: Path, accounts_file: Path
) -> None:
    result = CliRunner().invoke(
        path_owners_cli.root,
        [
            "check",
            *base_args(repository, accounts_file),
            "--no-expand-groups",
            "--uploader",
            "1",
            "--vote",
            "2:Verified:1",
            "ci/job.yml",
        ],
    )

    # bob owns ci/ through group/Maintainers only
    assert result.exit_code == 0, result.output
    assert "Approved by owners" in result.output


def test_resolve_logs_to_stderr(tmp_path: Path, accounts_file: Path) -> None:
    repo = tmp_path / "unknown-owner"
    repo.mkdir()
    init_repository(repo, {"OWNERS": "owners: [alice, nobody]\n"})

    result = CliRunner().invoke(
        path_owners_cli.root,
        ["resolve", *base_args(repo, accounts_file), "a.txt"],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["file_owners"] == {"a.txt": [ALICE]}
    assert "nobody" in result.stderr
