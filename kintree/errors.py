"""
Error and warning types for kinematic tree construction.

Fatal structural problems raise BuildError with an ErrorKind; recoverable
gaps are emitted as BuildWarning and collected per build.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .model.humanoid import RobotModel


class ErrorKind(Enum):
    """Kinds of structural errors that abort a build."""

    DUPLICATE_NAME = "duplicate_name"
    UNSUPPORTED_JOINT_KIND = "unsupported_joint_kind"
    MISSING_LINK = "missing_link"
    MISSING_PARENT = "missing_parent"
    MISSING_GEOMETRY_MATCH = "missing_geometry_match"
    PLANAR_UNSUPPORTED = "planar_unsupported"
    CYCLIC_GRAPH = "cyclic_graph"
    MISSING_RESOURCE = "missing_resource"
    INVALID_DESCRIPTION = "invalid_description"


class BuildError(Exception):
    """Structural error raised while building a kinematic tree."""

    def __init__(self, kind: ErrorKind, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.name = name

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def __repr__(self) -> str:
        return f"BuildError({self.kind.name}, {self.message!r}, name={self.name!r})"


class BuildWarning(UserWarning):
    """Recoverable gap: the build continues with a default."""


@dataclass
class BuildResult:
    """
    Outcome of one build.

    Exactly one of `model` and `error` is set.
    """

    model: Optional["RobotModel"] = None
    error: Optional[BuildError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and self.model is not None

    def unwrap(self) -> "RobotModel":
        """Return the model or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.model
