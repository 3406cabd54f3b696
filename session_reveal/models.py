"""Data models shared between the resolver actions and their collaborators."""

from typing import Literal

from pydantic import BaseModel
from pydantic import Field

NotificationLevel = Literal["info", "warning", "error"]

ActionStatus = Literal[
    "revealed",
    "previewed",
    "no_reference",
    "not_found",
    "is_directory",
    "unsupported_platform",
    "command_failed",
]


class ExecResult(BaseModel):
    """Result of running an external command."""

    code: int = Field(description="Process exit code")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")

    @property
    def ok(self) -> bool:
        return self.code == 0


class ActionOutcome(BaseModel):
    """What a reveal or preview action did.

    Attributes:
        status: Terminal state of the action
        path: Resolved path, when one was found
        message: Notification text shown to the user, if any
    """

    status: ActionStatus
    path: str | None = None
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in ("revealed", "previewed")
