"""Turns coordinator outcomes into ApiResponse envelopes.

    Completed       success envelope; ``pending_reconciliation`` added when a
                    trailing cleanup step failed
    Failed          the error is raised and rendered by the AppError handler
    PartialFailure  PartialFailureError (HTTP 202, code 5002) with the step
                    names in ``data``
"""

from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import Request

from src.ms_common.errors import PartialFailureError
from src.ms_common.response import ApiResponse, success_response
from src.ms_sync.domain.outcome import Completed, Failed, Outcome

T = TypeVar("T")


def present(
    outcome: Outcome[T],
    render: Callable[[T], dict[str, Any]],
    request: Request,
    message: str = "success",
) -> ApiResponse:
    if isinstance(outcome, Failed):
        raise outcome.error
    if not isinstance(outcome, Completed):
        raise PartialFailureError(outcome.operation, outcome.to_details())

    data = render(outcome.value)
    if outcome.pending is not None:
        data["pending_reconciliation"] = outcome.pending.to_details()
        message = f"{message}; reconciliation pending"
    resp = success_response(data, message=message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
