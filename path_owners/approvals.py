"""Owners approval requirement.

A change is ready when every modified file with owners got a qualifying
vote from at least one of its owners, on the label resolved for that file.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence

from pydantic import BaseModel, Field

from path_owners import metrics
from path_owners.accounts import AccountId
from path_owners.label import LabelDefinition, LabelType, LabelTypes, resolve_label
from path_owners.owners_map import OwnersMap

logger = logging.getLogger(__name__)


class Approval(BaseModel, frozen=True):
    """A vote recorded on the current patch set."""

    account_id: AccountId
    label: str
    value: int


class ApprovalStatus(BaseModel, frozen=True):
    ok: bool
    missing_paths: list[str] = Field(
        default_factory=list,
        description="Sorted paths still missing an owner approval",
    )

    @property
    def message(self) -> str:
        if self.ok:
            return "Approved by owners"
        return f"Missing approvals for path(s): [{', '.join(self.missing_paths)}]"


def is_label_approved(
    label_type: LabelType,
    score: int | None,
    owner: AccountId,
    uploader: AccountId,
    approval: Approval,
) -> bool:
    """Whether a single vote of an owner qualifies as approval.

    Each vote is judged on its own: a veto by one owner does not cancel the
    approval of another owner.
    """
    if label_type.ignore_self_approval and owner == uploader:
        return False

    value = approval.value
    if score is not None:
        return value >= score
    if label_type.function.is_max_value_required:
        return label_type.is_max_positive(value)
    if label_type.function.is_block and label_type.is_max_negative(value):
        return False
    return value > label_type.default_value


def has_sufficient_approval(
    approval: Approval,
    label: LabelDefinition,
    label_type: LabelType,
    owner: AccountId,
    uploader: AccountId,
) -> bool:
    return approval.label == label.name and is_label_approved(
        label_type, label.score, owner, uploader, approval
    )


def is_approved_by_owner(
    owner: AccountId,
    uploader: AccountId,
    approvals_by_account: Mapping[AccountId, Sequence[Approval]],
    label: LabelDefinition,
    label_type: LabelType,
) -> bool:
    return any(
        has_sufficient_approval(approval, label, label_type, owner, uploader)
        for approval in approvals_by_account.get(owner, ())
    )


def is_approval_missing(
    path: str,
    owners: Iterable[AccountId],
    uploader: AccountId,
    approvals_by_account: Mapping[AccountId, Sequence[Approval]],
    label: LabelDefinition,
    label_type: LabelType,
) -> bool:
    missing = not any(
        is_approved_by_owner(owner, uploader, approvals_by_account, label, label_type)
        for owner in owners
    )
    if missing:
        logger.debug(f"{path} is missing an approval on {label}")
    return missing


def group_by_account(approvals: Iterable[Approval]) -> dict[AccountId, list[Approval]]:
    by_account: dict[AccountId, list[Approval]] = defaultdict(list)
    for approval in approvals:
        by_account[approval.account_id].append(approval)
    return dict(by_account)


class OwnersSubmitRequirement:
    """Evaluates the owners approval requirement of a change.

    Evaluation only reads its arguments, it can run any number of times for
    the same change.
    """

    def evaluate(
        self,
        owners_map: OwnersMap,
        label_types: LabelTypes,
        approvals: Iterable[Approval],
        uploader: AccountId,
        project: str,
    ) -> ApprovalStatus:
        """Check the recorded votes against the file owners.

        Args:
            owners_map: owners of the change
            label_types: labels defined in the project
            approvals: votes on the current patch set
            uploader: account that uploaded the current patch set
            project: project name, for error reporting

        Raises:
            LabelNotFoundError: If a file requires a label the project does not define
        """
        with metrics.run_submit_requirement.time():
            status = self._evaluate(owners_map, label_types, approvals, uploader, project)
        metrics.submit_requirement_runs.labels(
            result="ok" if status.ok else "not_ready"
        ).inc()
        return status

    @staticmethod
    def _evaluate(
        owners_map: OwnersMap,
        label_types: LabelTypes,
        approvals: Iterable[Approval],
        uploader: AccountId,
        project: str,
    ) -> ApprovalStatus:
        if not owners_map.file_owners:
            logger.debug(
                f"Change of {project} has no file owners",
                extra={"project": project},
            )
            return ApprovalStatus(ok=True)

        approvals_by_account = group_by_account(approvals)
        missing_paths = []
        for path, owners in sorted(owners_map.file_owners.items()):
            label = resolve_label(label_types, owners_map.label_for(path), project)
            label_type = label_types[label.name]
            if is_approval_missing(
                path, owners, uploader, approvals_by_account, label, label_type
            ):
                missing_paths.append(path)

        if missing_paths:
            return ApprovalStatus(ok=False, missing_paths=missing_paths)
        return ApprovalStatus(ok=True)
