from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from fileops.ops.entry import Entry


class ResultCode(str, Enum):
    NOT_A_DIRECTORY = "not_a_directory"
    ACCESS_DENIED = "access_denied"
    NOTHING_SELECTED = "nothing_selected"
    MULTIPLE_SELECTED = "multiple_selected"
    EMPTY_NAME = "empty_name"
    INVALID_NAME = "invalid_name"
    NO_CHANGE = "no_change"
    SOURCE_MISSING = "source_missing"
    NOT_A_FILE = "not_a_file"
    DESTINATION_EXISTS = "destination_exists"
    EMPTY_CLIPBOARD = "empty_clipboard"
    UNKNOWN_ERROR = "unknown_error"


class Status(str, Enum):
    SUCCEEDED = "succeeded"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"


_REASONS = {
    ResultCode.NOT_A_DIRECTORY: "Not a directory",
    ResultCode.ACCESS_DENIED: "Access denied",
    ResultCode.NOTHING_SELECTED: "No items selected",
    ResultCode.MULTIPLE_SELECTED: "Cannot rename multiple items at once. Please select only one item.",
    ResultCode.EMPTY_NAME: "Please enter a new name",
    ResultCode.INVALID_NAME: "Invalid name",
    ResultCode.NO_CHANGE: "The new name is the same as the current name",
    ResultCode.SOURCE_MISSING: "File does not exist",
    ResultCode.NOT_A_FILE: "Not a file",
    ResultCode.DESTINATION_EXISTS: "A file with that name already exists",
    ResultCode.EMPTY_CLIPBOARD: "Clipboard is empty or contains unsupported data",
    ResultCode.UNKNOWN_ERROR: "Unknown error",
}


def describe(code: ResultCode) -> str:
    return _REASONS[code]


class InventoryError(RuntimeError):
    code = ResultCode.UNKNOWN_ERROR

    def __init__(self, path: str, message: str = "") -> None:
        super().__init__(message or f"{describe(self.code)}: {path}")
        self.path = path


class NotADirectory(InventoryError):
    code = ResultCode.NOT_A_DIRECTORY


class AccessDenied(InventoryError):
    code = ResultCode.ACCESS_DENIED


@dataclass(frozen=True)
class ItemFailure:
    name: str
    code: ResultCode
    detail: str = ""
    path: str = ""


@dataclass
class OperationResult:
    action: str
    status: Status
    code: ResultCode | None = None
    succeeded: list[str] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)
    entry: Entry | None = None
    entries: list[Entry] | None = None
    affected: list[Entry] = field(default_factory=list)
    detail: str = ""

    @classmethod
    def success(cls, action: str, succeeded: list[str] | None = None, **kwargs) -> "OperationResult":
        return cls(action=action, status=Status.SUCCEEDED, succeeded=list(succeeded or []), **kwargs)

    @classmethod
    def failure(cls, action: str, code: ResultCode, detail: str = "", **kwargs) -> "OperationResult":
        return cls(action=action, status=Status.FAILED, code=code, detail=detail, **kwargs)

    @classmethod
    def from_items(
        cls,
        action: str,
        succeeded: list[str],
        failures: list[ItemFailure],
        **kwargs,
    ) -> "OperationResult":
        if not failures:
            status = Status.SUCCEEDED
        elif succeeded:
            status = Status.PARTIAL_FAILURE
        else:
            status = Status.FAILED
        return cls(
            action=action,
            status=status,
            succeeded=list(succeeded),
            failures=list(failures),
            **kwargs,
        )

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCEEDED

    @property
    def failed_names(self) -> list[str]:
        return [failure.name for failure in self.failures]

    def summary(self) -> str:
        verb = self.action.capitalize()
        if self.status is Status.SUCCEEDED:
            if self.entry is not None:
                return f"{verb} succeeded: {self.entry.name}"
            count = len(self.succeeded)
            return f"{verb} succeeded for {count} item{'s' if count != 1 else ''}"
        if self.code is not None:
            reason = describe(self.code)
            if self.detail:
                reason = f"{reason} ({self.detail})"
            return f"{verb} failed: {reason}"
        names = ", ".join(self.failed_names)
        total = len(self.succeeded) + len(self.failures)
        if self.status is Status.PARTIAL_FAILURE:
            return f"{verb} partially failed: {len(self.failures)} of {total} failed ({names})"
        return f"{verb} failed for all {total} items ({names})"
