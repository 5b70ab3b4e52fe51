"""Translation from result envelopes to HTTP responses."""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from buildops.core.cqrs.base import CommandResult, QueryResult

VALIDATION_CODES = frozenset(
    {
        "REQUIRED_FIELD",
        "MIN_LENGTH",
        "MAX_LENGTH",
        "MAX_ITEMS",
        "INVALID_VALUE",
        "INVALID_FILE_TYPE",
        "FILE_TOO_LARGE",
        "DOMAIN_VALIDATION",
        "VALIDATION_ERROR",
        "COMMAND_VALIDATION_FAILED",
    }
)

_STATUS_BY_CODE = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "BUSINESS_RULE_VIOLATION": status.HTTP_409_CONFLICT,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "INTERNAL_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(
    result: CommandResult | QueryResult, success_status: int = status.HTTP_200_OK
) -> int:
    """HTTP status for a result, decided by its first error code."""
    if result.success:
        return success_status
    if not result.errors:
        return status.HTTP_400_BAD_REQUEST
    code = result.errors[0].code
    if code in VALIDATION_CODES:
        return status.HTTP_400_BAD_REQUEST
    return _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)


def result_response(
    result: CommandResult | QueryResult,
    success_status: int = status.HTTP_200_OK,
    headers: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(result, success_status),
        content=result.to_dict(),
        headers=headers,
    )


__all__ = ["VALIDATION_CODES", "result_response", "status_for"]
