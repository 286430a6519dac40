"""Exception types raised by the operation tag lifecycle."""

from __future__ import annotations


class OperationTagError(Exception):
    """Base class for every error raised by this package."""


class InvalidIdentifierError(OperationTagError, ValueError):
    """A composite resource id could not be parsed."""


class InvalidDeclarationError(OperationTagError, ValueError):
    """The declared state does not satisfy the resource schema."""


class ResourceAlreadyExistsError(OperationTagError):
    """The remote assignment already exists and must be imported instead."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"A resource with the ID {resource_id!r} already exists - to be managed "
            "this resource needs to be imported into the state. Please see the "
            f"resource documentation for {resource_type!r} for more information."
        )


class ResourceNotFoundForImportError(OperationTagError):
    """Import was requested for an id that has no remote counterpart."""

    def __init__(self, resource_id: str):
        self.resource_id = resource_id
        super().__init__(
            f"Cannot import non-existent remote object {resource_id!r}: the tag "
            "assignment was not found."
        )


class RemoteCallError(OperationTagError):
    """A control-plane call failed for a reason other than "not found"."""

    def __init__(self, message: str, cause: BaseException):
        self.cause = cause
        super().__init__(f"{message}: {cause}")


class DeadlineExceededError(OperationTagError, TimeoutError):
    """The lifecycle operation ran out of its time budget."""
