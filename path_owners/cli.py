import sys
from collections.abc import Callable
from pathlib import Path

import click
from ruamel.yaml import YAML

from path_owners.accounts import Account, AccountRegistry, Group
from path_owners.approvals import Approval, OwnersSubmitRequirement
from path_owners.blob import GitBlobReader
from path_owners.cache import create_entries_cache
from path_owners.exceptions import OwnersError
from path_owners.label import LabelType, LabelTypes
from path_owners.logger import setup_logging
from path_owners.owners_map import OwnersMap
from path_owners.resolver import FileDiff, PathOwners, modified_paths
from path_owners.settings import settings


def repo(function: Callable) -> Callable:
    function = click.option(
        "--repo",
        "repo_dir",
        required=True,
        type=click.Path(exists=True, file_okay=False),
        help="Local git repository of the project.",
    )(function)
    return function


def project(function: Callable) -> Callable:
    function = click.option(
        "--project",
        required=True,
        help="Project name.",
    )(function)
    return function


def branch(function: Callable) -> Callable:
    function = click.option(
        "--branch",
        required=True,
        help="Target branch of the change.",
    )(function)
    return function


def parents(function: Callable) -> Callable:
    help_msg = (
        "Parent project as NAME=DIR, nearest first. "
        "The last one should be the global configuration project."
    )
    function = click.option(
        "--parent",
        "parent_options",
        multiple=True,
        help=help_msg,
    )(function)
    return function


def accounts_file(function: Callable) -> Callable:
    help_msg = "YAML file with 'accounts', 'groups' and optional 'labels' lists."
    function = click.option(
        "--accounts",
        "accounts_path",
        type=click.Path(exists=True, dir_okay=False),
        help=help_msg,
    )(function)
    return function


def expand_groups(function: Callable) -> Callable:
    function = click.option(
        "--expand-groups/--no-expand-groups",
        default=settings.expand_groups,
        help="Present owners as accounts rather than as written.",
    )(function)
    return function


def modified_files(function: Callable) -> Callable:
    function = click.argument("paths", nargs=-1, required=True)(function)
    return function


@click.group()
@click.option("--log-level", help="log-level of the command. Defaults to INFO.")
@click.pass_context
def root(ctx: click.Context, log_level: str | None) -> None:
    ctx.ensure_object(dict)
    # stdout carries the command output
    logger = setup_logging(stream=sys.stderr)
    if log_level:
        logger.setLevel(log_level)


@root.command(short_help="Print the owners of the given files as JSON.")
@repo
@project
@branch
@parents
@accounts_file
@expand_groups
@modified_files
def resolve(
    repo_dir: str,
    project: str,
    branch: str,
    parent_options: tuple[str, ...],
    accounts_path: str | None,
    expand_groups: bool,
    paths: tuple[str, ...],
) -> None:
    data = load_project_data(accounts_path)
    owners_map = resolve_owners(
        data, repo_dir, project, branch, parent_options, expand_groups, paths
    )
    click.echo(owners_map.model_dump_json(indent=2))


@root.command(short_help="Check whether the votes satisfy the file owners.")
@repo
@project
@branch
@parents
@accounts_file
@expand_groups
@click.option("--uploader", type=int, required=True, help="Uploader account id.")
@click.option(
    "--vote",
    "votes",
    multiple=True,
    help="Vote as ACCOUNT:LABEL:VALUE, e.g. 1000001:Code-Review:2",
)
@modified_files
def check(
    repo_dir: str,
    project: str,
    branch: str,
    parent_options: tuple[str, ...],
    accounts_path: str | None,
    expand_groups: bool,
    uploader: int,
    votes: tuple[str, ...],
    paths: tuple[str, ...],
) -> None:
    data = load_project_data(accounts_path)
    approvals = [parse_vote(vote) for vote in votes]
    owners_map = resolve_owners(
        data, repo_dir, project, branch, parent_options, expand_groups, paths
    )
    if not settings.enable_submit_requirement:
        click.echo("Owners submit requirement is disabled")
        return
    try:
        status = OwnersSubmitRequirement().evaluate(
            owners_map,
            LabelTypes(data.get("labels") or [LabelType.code_review()]),
            approvals,
            uploader,
            project,
        )
    except OwnersError as e:
        raise click.ClickException(str(e)) from e
    click.echo(status.message)
    if not status.ok:
        sys.exit(1)


def load_project_data(accounts_path: str | None) -> dict:
    if accounts_path is None:
        return {"registry": AccountRegistry()}
    document = YAML(typ="safe", pure=True).load(Path(accounts_path)) or {}
    return {
        "registry": AccountRegistry(
            accounts=[Account(**a) for a in document.get("accounts") or []],
            groups=[Group(**g) for g in document.get("groups") or []],
        ),
        "labels": [LabelType(**label) for label in document.get("labels") or []],
    }


def parse_vote(vote: str) -> Approval:
    try:
        account, label, value = vote.split(":")
        return Approval(account_id=int(account), label=label, value=int(value))
    except ValueError as e:
        raise click.BadParameter(f"invalid vote {vote!r}", param_hint="--vote") from e


def resolve_owners(
    data: dict,
    repo_dir: str,
    project: str,
    branch: str,
    parent_options: tuple[str, ...],
    expand_groups: bool,
    paths: tuple[str, ...],
) -> OwnersMap:
    repositories = {project: repo_dir}
    parent_projects = []
    for option in parent_options:
        name, sep, directory = option.partition("=")
        if not sep:
            raise click.BadParameter(
                f"expected NAME=DIR, got {option!r}", param_hint="--parent"
            )
        repositories[name] = directory
        parent_projects.append(name)

    engine = PathOwners(
        accounts=data["registry"],
        blob_reader=GitBlobReader(repositories),
        cache=create_entries_cache(settings.cache_max_size, settings.cache_ttl),
        config_ref=settings.config_ref,
    )
    try:
        return engine.resolve(
            project=project,
            branch=None if settings.is_branch_disabled(branch) else branch,
            paths=modified_paths(FileDiff(path=path) for path in paths),
            parent_projects=parent_projects,
            expand_groups=expand_groups,
            global_label=settings.global_label,
        )
    except OwnersError as e:
        raise click.ClickException(str(e)) from e
