"""Composite resource id parsing/formatting for API Management objects.

Ids follow the ARM layout::

    /subscriptions/{sub}/resourceGroups/{rg}/providers/Microsoft.ApiManagement
        /service/{service}/apis/{api}/operations/{operation}[/tags/{tag}]

Segment keys are case-sensitive, values must be non-empty and no trailing
segments are accepted.
"""

from __future__ import annotations

from dataclasses import dataclass

from utils.errors import InvalidIdentifierError

PROVIDER_NAMESPACE = "Microsoft.ApiManagement"

_SERVICE_KEYS = ("subscriptions", "resourceGroups", "providers", "service")
_API_OPERATION_KEYS = _SERVICE_KEYS + ("apis", "operations")
_API_OPERATION_TAG_KEYS = _API_OPERATION_KEYS + ("tags",)
_TAG_KEYS = _SERVICE_KEYS + ("tags",)


def _split_segments(value: str, keys: tuple[str, ...], kind: str) -> dict[str, str]:
    if not isinstance(value, str) or not value.strip():
        raise InvalidIdentifierError(f"parsing {kind} ID: ID was empty")

    parts = value.strip("/").split("/")
    if len(parts) % 2 != 0:
        raise InvalidIdentifierError(
            f"parsing {kind} ID {value!r}: the number of segments wasn't divisible by 2"
        )
    if len(parts) != 2 * len(keys):
        raise InvalidIdentifierError(
            f"parsing {kind} ID {value!r}: expected {len(keys)} key/value pairs, "
            f"got {len(parts) // 2}"
        )

    values: dict[str, str] = {}
    for index, expected_key in enumerate(keys):
        key, segment = parts[2 * index], parts[2 * index + 1]
        if key != expected_key:
            raise InvalidIdentifierError(
                f"parsing {kind} ID {value!r}: expected segment {expected_key!r} "
                f"at position {index}, got {key!r}"
            )
        if not segment.strip():
            raise InvalidIdentifierError(
                f"parsing {kind} ID {value!r}: segment {expected_key!r} was empty"
            )
        values[key] = segment

    if values["providers"] != PROVIDER_NAMESPACE:
        raise InvalidIdentifierError(
            f"parsing {kind} ID {value!r}: expected provider {PROVIDER_NAMESPACE!r}, "
            f"got {values['providers']!r}"
        )
    return values


def _service_prefix(subscription_id: str, resource_group: str, service_name: str) -> str:
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/{PROVIDER_NAMESPACE}/service/{service_name}"
    )


@dataclass(frozen=True)
class ApiOperationId:
    """Id of an operation defined under an API."""

    subscription_id: str
    resource_group: str
    service_name: str
    api_name: str
    operation_name: str

    def id(self) -> str:
        prefix = _service_prefix(self.subscription_id, self.resource_group, self.service_name)
        return f"{prefix}/apis/{self.api_name}/operations/{self.operation_name}"

    def __str__(self) -> str:
        return (
            f"Api Operation (Subscription {self.subscription_id!r} / Resource Group "
            f"{self.resource_group!r} / Service {self.service_name!r} / Api "
            f"{self.api_name!r} / Operation {self.operation_name!r})"
        )

    @classmethod
    def parse(cls, value: str) -> "ApiOperationId":
        parts = _split_segments(value, _API_OPERATION_KEYS, "ApiOperation")
        return cls(
            subscription_id=parts["subscriptions"],
            resource_group=parts["resourceGroups"],
            service_name=parts["service"],
            api_name=parts["apis"],
            operation_name=parts["operations"],
        )


@dataclass(frozen=True)
class TagId:
    """Id of a tag scoped to an API Management service."""

    subscription_id: str
    resource_group: str
    service_name: str
    name: str

    def id(self) -> str:
        prefix = _service_prefix(self.subscription_id, self.resource_group, self.service_name)
        return f"{prefix}/tags/{self.name}"

    def __str__(self) -> str:
        return (
            f"Tag (Subscription {self.subscription_id!r} / Resource Group "
            f"{self.resource_group!r} / Service {self.service_name!r} / Name {self.name!r})"
        )

    @classmethod
    def parse(cls, value: str) -> "TagId":
        parts = _split_segments(value, _TAG_KEYS, "Tag")
        return cls(
            subscription_id=parts["subscriptions"],
            resource_group=parts["resourceGroups"],
            service_name=parts["service"],
            name=parts["tags"],
        )


@dataclass(frozen=True)
class ApiOperationTagId:
    """Id of the assignment of a tag to an API operation."""

    subscription_id: str
    resource_group: str
    service_name: str
    api_name: str
    operation_name: str
    tag_name: str

    def id(self) -> str:
        return f"{self.api_operation_id().id()}/tags/{self.tag_name}"

    def api_operation_id(self) -> ApiOperationId:
        return ApiOperationId(
            subscription_id=self.subscription_id,
            resource_group=self.resource_group,
            service_name=self.service_name,
            api_name=self.api_name,
            operation_name=self.operation_name,
        )

    def __str__(self) -> str:
        return (
            f"Api Operation Tag (Subscription {self.subscription_id!r} / Resource Group "
            f"{self.resource_group!r} / Service {self.service_name!r} / Api "
            f"{self.api_name!r} / Operation {self.operation_name!r} / Tag {self.tag_name!r})"
        )

    @classmethod
    def parse(cls, value: str) -> "ApiOperationTagId":
        parts = _split_segments(value, _API_OPERATION_TAG_KEYS, "ApiOperationTag")
        return cls(
            subscription_id=parts["subscriptions"],
            resource_group=parts["resourceGroups"],
            service_name=parts["service"],
            api_name=parts["apis"],
            operation_name=parts["operations"],
            tag_name=parts["tags"],
        )
