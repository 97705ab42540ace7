"""Approval labels.

An OWNERS file may name the label (and optionally the minimum score) that
file owners have to vote for a change to be submittable, e.g.
``label: Code-Review,1``. Without one, the host's ``Code-Review`` label
applies and its own function decides what counts as approval.
"""

import logging
import re
from collections.abc import Iterable
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field

from path_owners.exceptions import LabelNotFoundError

logger = logging.getLogger(__name__)

CODE_REVIEW = "Code-Review"

LABEL_PATTERN = re.compile(r"^([a-zA-Z0-9-]+)(?:\s*,\s*(\d))?$")


class LabelDefinition(BaseModel, frozen=True):
    """Label name plus optional required score."""

    name: str = Field(..., description="Label name, e.g. Code-Review")
    score: int | None = Field(
        default=None,
        description="Minimum vote value; None defers to the label function",
    )

    @classmethod
    def parse(cls, definition: str | None) -> Self | None:
        """Parse ``Name`` or ``Name,Score``.

        Returns:
            The label definition, or None for a blank or invalid definition
        """
        if definition is None or not definition.strip():
            return None
        match = LABEL_PATTERN.match(definition.strip())
        if not match:
            logger.error(f"Parsing label definition [{definition}] has failed.")
            return None
        score = match.group(2)
        return cls(name=match.group(1), score=int(score) if score else None)

    @classmethod
    def code_review(cls) -> Self:
        return cls(name=CODE_REVIEW)

    def __str__(self) -> str:
        return self.name if self.score is None else f"{self.name},{self.score}"


class LabelFunction(StrEnum):
    MAX_WITH_BLOCK = "MaxWithBlock"
    ANY_WITH_BLOCK = "AnyWithBlock"
    MAX_NO_BLOCK = "MaxNoBlock"
    NO_BLOCK = "NoBlock"
    NO_OP = "NoOp"
    PATCH_SET_LOCK = "PatchSetLock"

    @property
    def is_max_value_required(self) -> bool:
        return self in {LabelFunction.MAX_WITH_BLOCK, LabelFunction.MAX_NO_BLOCK}

    @property
    def is_block(self) -> bool:
        return self in {LabelFunction.MAX_WITH_BLOCK, LabelFunction.ANY_WITH_BLOCK}


class LabelType(BaseModel, frozen=True):
    """A voting label as configured in the host project."""

    name: str
    values: dict[int, str] = Field(
        ...,
        description="Allowed vote values and their descriptions",
    )
    function: LabelFunction = LabelFunction.MAX_WITH_BLOCK
    default_value: int = 0
    ignore_self_approval: bool = False

    @property
    def max_value(self) -> int:
        return max(self.values)

    @property
    def min_value(self) -> int:
        return min(self.values)

    def is_max_positive(self, value: int) -> bool:
        return value == self.max_value

    def is_max_negative(self, value: int) -> bool:
        return value == self.min_value

    @classmethod
    def code_review(cls) -> Self:
        return cls(
            name=CODE_REVIEW,
            values={
                -2: "This shall not be submitted",
                -1: "I would prefer this is not submitted as is",
                0: "No score",
                1: "Looks good to me, but someone else must approve",
                2: "Looks good to me, approved",
            },
        )


class LabelTypes:
    """The label types defined for one project, looked up by name."""

    def __init__(self, label_types: Iterable[LabelType]) -> None:
        self._by_name = {label_type.name: label_type for label_type in label_types}

    def __getitem__(self, name: str) -> LabelType:
        return self._by_name[name]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name


def resolve_label(
    label_types: LabelTypes,
    configured: LabelDefinition | None,
    project: str,
) -> LabelDefinition:
    """Pick the label owners have to vote on.

    The configured label is used when there is one, otherwise the default
    Code-Review label without an explicit score.

    Raises:
        LabelNotFoundError: If the resulting label is not defined in the project
    """
    label = configured or LabelDefinition.code_review()
    if label.name not in label_types:
        error = LabelNotFoundError(project, label.name)
        logger.info(f"Invalid configuration: {error}", extra={"project": project})
        raise error
    return label
