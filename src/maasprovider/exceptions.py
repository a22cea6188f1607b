# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

from enum import StrEnum

from pydantic import BaseModel

from apiclient.maas_client import MAASAPIError

INVALID_ARGUMENT_VIOLATION_TYPE = "InvalidArgumentViolation"
MISSING_ARGUMENT_VIOLATION_TYPE = "MissingArgumentViolation"
UNKNOWN_ARGUMENT_VIOLATION_TYPE = "UnknownArgumentViolation"
NOT_FOUND_VIOLATION_TYPE = "NotFoundViolation"


class ExceptionDetail(BaseModel):
    type: str
    message: str
    field: str | None = None


class ProviderException(Exception):
    def __init__(
        self, message: str, details: list[ExceptionDetail] | None = None
    ):
        super().__init__(message)
        self.details = details


class ImportIDFormatException(ProviderException):
    def __init__(self, import_id: str):
        super().__init__(
            f"unexpected format of ID ({import_id!r}), expected MACHINE:RAID",
            [
                ExceptionDetail(
                    type=INVALID_ARGUMENT_VIOLATION_TYPE,
                    field="id",
                    message="expected MACHINE:RAID",
                )
            ],
        )
        self.import_id = import_id


class NotFoundException(ProviderException):
    kind = "resource"

    def __init__(self, identifier: str):
        super().__init__(
            f"{self.kind} ({identifier}) was not found",
            [
                ExceptionDetail(
                    type=NOT_FOUND_VIOLATION_TYPE,
                    message=f"no {self.kind} matches {identifier!r}",
                )
            ],
        )
        self.identifier = identifier


class MachineNotFound(NotFoundException):
    kind = "machine"


class RaidNotFound(NotFoundException):
    kind = "raid"


class StateException(ProviderException):
    """The state could not be recorded."""


class ConfigValidationException(ProviderException):
    """A resource configuration does not match its schema."""

    def __init__(self, details: list[ExceptionDetail]):
        super().__init__(
            "Invalid resource configuration: "
            + "; ".join(
                f"{detail.field}: {detail.message}" for detail in details
            ),
            details,
        )


class ProviderConfigException(ProviderException):
    """The provider itself is not configured correctly."""


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    severity: Severity = Severity.ERROR
    summary: str
    detail: str = ""


def diagnostics_from_exception(error: Exception) -> list[Diagnostic]:
    """Convert `error` into the diagnostics reported to the host.

    API errors are passed through verbatim as the summary.
    """
    if isinstance(error, ProviderException) and error.details:
        return [
            Diagnostic(
                summary=str(error),
                detail=(
                    f"{detail.field}: {detail.message}"
                    if detail.field
                    else detail.message
                ),
            )
            for detail in error.details
        ]
    if isinstance(error, MAASAPIError):
        return [Diagnostic(summary=str(error), detail=error.url or "")]
    return [Diagnostic(summary=str(error))]
