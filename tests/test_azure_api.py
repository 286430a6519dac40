from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import (
    HttpResponseError,
    ResourceNotFoundError,
    ServiceResponseTimeoutError,
)

from utils.azure_api import Failed, Found, NotFound, TagClient, call_with_deadline, is_not_found_error
from utils.errors import DeadlineExceededError
from utils.timeouts import Deadline


def _http_error(status: int) -> HttpResponseError:
    error = HttpResponseError(message=f"status {status}")
    error.status_code = status
    return error


def test_is_not_found_error_checks_type_and_status() -> None:
    assert is_not_found_error(ResourceNotFoundError(message="gone"))
    assert is_not_found_error(_http_error(404))
    assert not is_not_found_error(_http_error(500))
    assert not is_not_found_error(ValueError("nope"))


def test_call_with_deadline_classifies_results() -> None:
    deadline = Deadline(60, operation="read")

    found = call_with_deadline(lambda **_: {"name": "t"}, deadline=deadline, description="x")
    missing = call_with_deadline(
        MagicMock(side_effect=ResourceNotFoundError(message="gone")),
        deadline=deadline,
        description="x",
    )
    failed = call_with_deadline(
        MagicMock(side_effect=_http_error(503)), deadline=deadline, description="x"
    )

    assert found == Found({"name": "t"})
    assert isinstance(missing, NotFound)
    assert isinstance(failed, Failed)
    assert failed.cause.status_code == 503


def test_call_with_deadline_does_not_swallow_non_sdk_errors() -> None:
    with pytest.raises(KeyError):
        call_with_deadline(
            MagicMock(side_effect=KeyError("bug")),
            deadline=Deadline(60),
            description="x",
        )


def test_call_with_deadline_bounds_connect_and_read_by_remaining_budget() -> None:
    now = [0.0]
    deadline = Deadline(300, clock=lambda: now[0])
    now[0] = 280.0
    fn = MagicMock(return_value=None)

    call_with_deadline(fn, "rg", deadline=deadline, description="x")

    args, kwargs = fn.call_args
    assert args == ("rg",)
    assert kwargs["timeout"] == 20
    assert kwargs["read_timeout"] == 20


def test_sdk_timeout_after_deadline_becomes_deadline_exceeded() -> None:
    now = [0.0]

    def slow_call(**_):
        now[0] = 10.0
        raise ServiceResponseTimeoutError(message="read timed out")

    deadline = Deadline(5, operation="delete", clock=lambda: now[0])

    with pytest.raises(DeadlineExceededError) as excinfo:
        call_with_deadline(slow_call, deadline=deadline, description="detach")

    assert "delete timeout" in str(excinfo.value)


def test_sdk_timeout_within_deadline_is_a_failure() -> None:
    result = call_with_deadline(
        MagicMock(side_effect=ServiceResponseTimeoutError(message="socket timeout")),
        deadline=Deadline(60),
        description="x",
    )

    assert isinstance(result, Failed)


def test_tag_client_maps_calls_to_sdk_methods() -> None:
    apim = MagicMock()
    apim.tag.get_by_operation.return_value = {"name": "t"}
    client = TagClient(apim)
    deadline = Deadline(60)

    result = client.get_assignment_by_operation("rg", "svc", "api", "op", "t", deadline=deadline)
    client.get_tag("rg", "svc", "t", deadline=deadline)
    client.assign_to_operation("rg", "svc", "api", "op", "t", deadline=deadline)
    client.detach_from_operation("rg", "svc", "api", "op", "t", deadline=deadline)

    assert result == Found({"name": "t"})
    assert apim.tag.get_by_operation.call_args.args == ("rg", "svc", "api", "op", "t")
    assert apim.tag.get.call_args.args == ("rg", "svc", "t")
    apim.tag.assign_to_operation.assert_called_once()
    apim.tag.detach_from_operation.assert_called_once()
