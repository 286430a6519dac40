"""Thin wrapper around the API Management tag operations of the Azure SDK.

Each call returns one of three explicit results instead of raising for a
missing object, so callers can decide per call site whether "not found" is
acceptable:

- `Found(record)`: the call succeeded.
- `NotFound(cause)`: the control plane answered 404.
- `Failed(cause)`: any other SDK error.

Retries, authentication and transport timeouts are handled by the SDK
pipeline; this module only forwards the remaining deadline as the per-call
`timeout` and `read_timeout` keywords.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Union

from azure.core.exceptions import (
    AzureError,
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestTimeoutError,
    ServiceResponseTimeoutError,
)

from utils.errors import DeadlineExceededError
from utils.timeouts import Deadline

logger = logging.getLogger(__name__)

_NOT_FOUND_STATUS = 404


@dataclass(frozen=True)
class Found:
    record: Any


@dataclass(frozen=True)
class NotFound:
    cause: AzureError


@dataclass(frozen=True)
class Failed:
    cause: AzureError


CallResult = Union[Found, NotFound, Failed]


def _status_code_from_error(error: BaseException) -> int | None:
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    return int(status) if isinstance(status, int) else None


def is_not_found_error(error: BaseException) -> bool:
    """Return True when an SDK exception means the object does not exist."""
    if isinstance(error, ResourceNotFoundError):
        return True
    if isinstance(error, HttpResponseError):
        return _status_code_from_error(error) == _NOT_FOUND_STATUS
    return False


def call_with_deadline(
    fn: Callable[..., Any],
    *args: Any,
    deadline: Deadline,
    description: str,
) -> CallResult:
    """Run one SDK call bounded by `deadline` and classify the outcome.

    Args:
        fn: Bound SDK method, e.g. `client.tag.get_by_operation`.
        *args: Positional arguments for `fn`.
        deadline: Budget of the surrounding lifecycle operation.
        description: Human-readable call name for logs and timeout errors.

    Returns:
        `Found`, `NotFound` or `Failed`.

    Raises:
        DeadlineExceededError: If the budget is spent before or during the call.
    """
    remaining = deadline.check()
    logger.debug("Calling %s (%.0fs remaining)", description, remaining)
    try:
        # `timeout` caps connect and retries; `read_timeout` caps a stalled response.
        return Found(fn(*args, timeout=remaining, read_timeout=remaining))
    except (ServiceRequestTimeoutError, ServiceResponseTimeoutError) as exc:
        if deadline.expired():
            raise DeadlineExceededError(
                f"{description} did not finish within the {deadline.operation} timeout "
                f"of {deadline.budget_s:g}s"
            ) from exc
        return Failed(exc)
    except AzureError as exc:
        if is_not_found_error(exc):
            logger.debug("%s returned 404", description)
            return NotFound(exc)
        return Failed(exc)


class TagClient:
    """The four tag calls the operation tag lifecycle needs."""

    def __init__(self, apim_client: Any):
        self.apim_client = apim_client

    @property
    def _tags(self) -> Any:
        return self.apim_client.tag

    def get_tag(
        self, resource_group: str, service_name: str, tag_name: str, *, deadline: Deadline
    ) -> CallResult:
        return call_with_deadline(
            self._tags.get,
            resource_group,
            service_name,
            tag_name,
            deadline=deadline,
            description=f"get tag {tag_name!r}",
        )

    def get_assignment_by_operation(
        self,
        resource_group: str,
        service_name: str,
        api_name: str,
        operation_name: str,
        tag_name: str,
        *,
        deadline: Deadline,
    ) -> CallResult:
        return call_with_deadline(
            self._tags.get_by_operation,
            resource_group,
            service_name,
            api_name,
            operation_name,
            tag_name,
            deadline=deadline,
            description=f"get tag {tag_name!r} of operation {api_name}/{operation_name}",
        )

    def assign_to_operation(
        self,
        resource_group: str,
        service_name: str,
        api_name: str,
        operation_name: str,
        tag_name: str,
        *,
        deadline: Deadline,
    ) -> CallResult:
        return call_with_deadline(
            self._tags.assign_to_operation,
            resource_group,
            service_name,
            api_name,
            operation_name,
            tag_name,
            deadline=deadline,
            description=f"assign tag {tag_name!r} to operation {api_name}/{operation_name}",
        )

    def detach_from_operation(
        self,
        resource_group: str,
        service_name: str,
        api_name: str,
        operation_name: str,
        tag_name: str,
        *,
        deadline: Deadline,
    ) -> CallResult:
        return call_with_deadline(
            self._tags.detach_from_operation,
            resource_group,
            service_name,
            api_name,
            operation_name,
            tag_name,
            deadline=deadline,
            description=f"detach tag {tag_name!r} from operation {api_name}/{operation_name}",
        )
