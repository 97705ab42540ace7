"""Exceptions raised by the owners resolution engine."""


class OwnersError(Exception):
    """Base class for all path-owners errors."""


class InvalidOwnersFileError(OwnersError):
    """An OWNERS file could not be read from the repository or parsed."""

    def __init__(self, project: str, owners_path: str, branch: str) -> None:
        self.project = project
        self.owners_path = owners_path
        self.branch = branch
        super().__init__(
            f"Invalid owners file: {owners_path}, in project: {project}, on branch {branch}"
        )


class LabelNotFoundError(OwnersError):
    """The label required by the OWNERS configuration is not defined in the project."""

    def __init__(self, project: str, label: str) -> None:
        self.project = project
        self.label = label
        super().__init__(f"Project {project} has no {label} label defined")


class MatcherMergeError(OwnersError):
    pass


class OwnersParseError(OwnersError):
    """The content of an OWNERS file is not a valid OWNERS document."""
