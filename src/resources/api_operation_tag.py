"""Lifecycle of the assignment of an API Management tag to an API operation.

The resource has no update: both `api_operation_id` and `name` force a new
resource, so the surrounding workflow destroys and recreates instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from resources.schema import FieldSpec, build_schema, validate_declaration
from utils.azure_api import Failed, Found, NotFound
from utils.clients import ProviderContext
from utils.errors import (
    RemoteCallError,
    ResourceAlreadyExistsError,
    ResourceNotFoundForImportError,
)
from utils.ids import ApiOperationId, ApiOperationTagId, TagId
from utils.timeouts import Deadline, ResourceTimeouts

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "azurerm_api_management_api_operation_tag"


@dataclass
class ResourceState:
    """Declared/observed attributes plus the id; an empty id means absent."""

    id: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    timeouts: Mapping[str, Any] | None = None

    @property
    def exists(self) -> bool:
        return bool(self.id)


class TagAssignmentResource:
    """Create/Read/Delete/Import for `azurerm_api_management_api_operation_tag`."""

    def __init__(
        self,
        *,
        four_point_oh_beta: bool = False,
        timeouts: ResourceTimeouts | None = None,
    ):
        self.schema: dict[str, FieldSpec] = build_schema(four_point_oh_beta)
        self.timeouts = timeouts or ResourceTimeouts()

    def _deadline(self, state: ResourceState, operation: str) -> Deadline:
        timeouts = self.timeouts.with_overrides(state.timeouts)
        return Deadline(getattr(timeouts, operation), operation=operation)

    def create(self, ctx: ProviderContext, state: ResourceState) -> ResourceState:
        """Assign the declared tag to the declared operation.

        Raises:
            InvalidIdentifierError: If `api_operation_id` is malformed.
            InvalidDeclarationError: If the declared attributes are invalid.
            ResourceAlreadyExistsError: If the assignment is already present.
            RemoteCallError: On any other control-plane failure.
        """
        declared = validate_declaration(self.schema, state.attributes)
        deadline = self._deadline(state, "create")
        client = ctx.tag_client

        api_operation_id = ApiOperationId.parse(declared["api_operation_id"])
        tag_id = TagId(
            subscription_id=ctx.subscription_id,
            resource_group=api_operation_id.resource_group,
            service_name=api_operation_id.service_name,
            name=declared["name"],
        )
        resource_id = ApiOperationTagId(
            subscription_id=ctx.subscription_id,
            resource_group=api_operation_id.resource_group,
            service_name=api_operation_id.service_name,
            api_name=api_operation_id.api_name,
            operation_name=api_operation_id.operation_name,
            tag_name=tag_id.name,
        )

        # The tag itself is not required to exist up front.
        tag_result = client.get_tag(
            tag_id.resource_group, tag_id.service_name, tag_id.name, deadline=deadline
        )
        if isinstance(tag_result, Failed):
            raise RemoteCallError(
                f"checking for presence of Tag {resource_id}", tag_result.cause
            ) from tag_result.cause

        existing = client.get_assignment_by_operation(
            resource_id.resource_group,
            resource_id.service_name,
            resource_id.api_name,
            resource_id.operation_name,
            resource_id.tag_name,
            deadline=deadline,
        )
        if isinstance(existing, Failed):
            raise RemoteCallError(
                f"checking for presence of Tag Assignment {resource_id}", existing.cause
            ) from existing.cause
        if not isinstance(existing, NotFound):
            raise ResourceAlreadyExistsError(RESOURCE_TYPE, resource_id.id())

        assigned = client.assign_to_operation(
            resource_id.resource_group,
            resource_id.service_name,
            resource_id.api_name,
            resource_id.operation_name,
            resource_id.tag_name,
            deadline=deadline,
        )
        if isinstance(assigned, (Failed, NotFound)):
            raise RemoteCallError(
                f"assigning to api operation {resource_id}", assigned.cause
            ) from assigned.cause

        state.id = resource_id.id()
        logger.info("Assigned %s", resource_id)
        return self.read(ctx, state)

    def read(self, ctx: ProviderContext, state: ResourceState) -> ResourceState:
        """Refresh `state` from the control plane.

        A missing assignment clears `state.id` instead of raising.
        """
        resource_id = ApiOperationTagId.parse(state.id)
        deadline = self._deadline(state, "read")
        api_operation_id = ApiOperationId(
            # Provider subscription, not the one stored in the id.
            subscription_id=ctx.subscription_id,
            resource_group=resource_id.resource_group,
            service_name=resource_id.service_name,
            api_name=resource_id.api_name,
            operation_name=resource_id.operation_name,
        )

        result = ctx.tag_client.get_assignment_by_operation(
            resource_id.resource_group,
            resource_id.service_name,
            resource_id.api_name,
            resource_id.operation_name,
            resource_id.tag_name,
            deadline=deadline,
        )
        if isinstance(result, NotFound):
            logger.debug("%s was not found - removing from state!", resource_id)
            state.id = ""
            state.attributes = {}
            return state
        if isinstance(result, Failed):
            raise RemoteCallError(f"retrieving {resource_id}", result.cause) from result.cause

        observed = {
            "api_operation_id": api_operation_id.id(),
            "name": resource_id.tag_name,
        }
        # display_name is kept as declared; the API never reports it back.
        if "display_name" in self.schema and state.attributes.get("display_name"):
            observed["display_name"] = state.attributes["display_name"]
        state.attributes = observed
        return state

    def delete(self, ctx: ProviderContext, state: ResourceState) -> None:
        """Detach the tag from the operation.

        Unlike `read`, a 404 from the control plane is surfaced as an error.
        """
        resource_id = ApiOperationTagId.parse(state.id)
        deadline = self._deadline(state, "delete")

        result = ctx.tag_client.detach_from_operation(
            resource_id.resource_group,
            resource_id.service_name,
            resource_id.api_name,
            resource_id.operation_name,
            resource_id.tag_name,
            deadline=deadline,
        )
        if isinstance(result, (Failed, NotFound)):
            raise RemoteCallError(
                f"detaching api operation tag {resource_id}", result.cause
            ) from result.cause
        logger.info("Detached %s", resource_id)

    def import_state(self, ctx: ProviderContext, resource_id: str) -> ResourceState:
        """Adopt an existing assignment given only its id."""
        ApiOperationTagId.parse(resource_id)
        state = self.read(ctx, ResourceState(id=resource_id))
        if not state.exists:
            raise ResourceNotFoundForImportError(resource_id)
        return state

    def exists(self, ctx: ProviderContext, resource_id: str) -> bool:
        """Return whether the assignment behind `resource_id` is present remotely."""
        parsed = ApiOperationTagId.parse(resource_id)
        deadline = Deadline(self.timeouts.read, operation="read")
        result = ctx.tag_client.get_assignment_by_operation(
            parsed.resource_group,
            parsed.service_name,
            parsed.api_name,
            parsed.operation_name,
            parsed.tag_name,
            deadline=deadline,
        )
        if isinstance(result, Failed):
            raise RemoteCallError(f"reading {parsed}", result.cause) from result.cause
        return isinstance(result, Found)
