"""Declared-state schema for the API operation tag resource."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from utils.errors import InvalidDeclarationError
from utils.ids import ApiOperationId

logger = logging.getLogger(__name__)

_CHILD_NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]{1,78}[a-zA-Z0-9]$")

DISPLAY_NAME_DEPRECATION = (
    "This property has been deprecated and will be removed in v4.0 of the provider"
)


def validate_api_operation_id(value: Any, key: str) -> None:
    """Raise `InvalidIdentifierError` unless `value` is an API operation id."""
    ApiOperationId.parse(value)


def validate_child_name(value: Any, key: str) -> None:
    if not isinstance(value, str) or not _CHILD_NAME_RE.match(value):
        raise InvalidDeclarationError(
            f"{key!r} may only be up to 80 characters in length, not start or end "
            "with `-` and only contain alphanumeric characters and `-`"
        )


def validate_string(value: Any, key: str) -> None:
    if not isinstance(value, str):
        raise InvalidDeclarationError(f"expected {key!r} to be a string")


@dataclass(frozen=True)
class FieldSpec:
    """One argument of the resource."""

    required: bool
    force_new: bool
    validate: Callable[[Any, str], None]
    deprecated: str | None = None


def build_schema(four_point_oh_beta: bool) -> dict[str, FieldSpec]:
    """Return the resource schema.

    `display_name` only exists before the 4.0 major version; it is never sent
    to the API and never read back.
    """
    schema = {
        "api_operation_id": FieldSpec(
            required=True, force_new=True, validate=validate_api_operation_id
        ),
        "name": FieldSpec(required=True, force_new=True, validate=validate_child_name),
    }
    if not four_point_oh_beta:
        schema["display_name"] = FieldSpec(
            required=False,
            force_new=True,
            validate=validate_string,
            deprecated=DISPLAY_NAME_DEPRECATION,
        )
    return schema


def validate_declaration(
    schema: Mapping[str, FieldSpec], declared: Mapping[str, Any]
) -> dict[str, Any]:
    """Check `declared` against `schema` and return the accepted fields.

    Raises:
        InvalidDeclarationError: On unknown, missing or invalid fields.
    """
    unknown = sorted(k for k in declared if k not in schema)
    if unknown:
        raise InvalidDeclarationError(
            f"An argument named {unknown[0]!r} is not expected here."
        )

    accepted: dict[str, Any] = {}
    for key, spec in schema.items():
        value = declared.get(key)
        if value is None or value == "":
            if spec.required:
                raise InvalidDeclarationError(f"The argument {key!r} is required.")
            continue
        spec.validate(value, key)
        if spec.deprecated:
            logger.warning("Argument %r is deprecated: %s", key, spec.deprecated)
        accepted[key] = value
    return accepted

