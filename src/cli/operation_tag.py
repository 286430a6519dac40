#!/usr/bin/env python3
"""
Create, read, delete or import an API Management operation tag assignment.
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from typing import Any, Sequence

SRC_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from resources.api_operation_tag import TagAssignmentResource, ResourceState  # noqa: E402
from utils.auth import AUTH_METHODS, get_credentials  # noqa: E402
from utils.clients import ProviderContext, build_provider_context  # noqa: E402
from utils.config import (  # noqa: E402
    DEFAULT_PROVIDER_CONFIG,
    load_provider_settings,
    resolve_subscription_id,
)
from utils.errors import RemoteCallError  # noqa: E402


def _state_payload(state: ResourceState) -> dict[str, Any]:
    return {"id": state.id or None, "exists": state.exists, "attributes": state.attributes}


def run_command(
    args: argparse.Namespace,
    resource: TagAssignmentResource,
    ctx: ProviderContext,
) -> dict[str, Any]:
    """Dispatch a parsed sub-command and return a JSON-serializable result."""
    if args.command == "create":
        attributes = {"api_operation_id": args.api_operation_id, "name": args.name}
        if args.display_name:
            attributes["display_name"] = args.display_name
        state = resource.create(ctx, ResourceState(attributes=attributes))
        return {"action": "created", **_state_payload(state)}

    if args.command == "read":
        state = resource.read(ctx, ResourceState(id=args.id))
        return {"action": "read", **_state_payload(state)}

    if args.command == "delete":
        resource.delete(ctx, ResourceState(id=args.id))
        return {"action": "deleted", "id": args.id}

    if args.command == "import":
        state = resource.import_state(ctx, args.id)
        return {"action": "imported", **_state_payload(state)}

    raise ValueError(f"Unknown command: {args.command}")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Manage the assignment of an API Management tag to an API operation.",
    )
    parser.add_argument(
        "--auth",
        choices=list(AUTH_METHODS),
        help=(
            "Auth method: default (DefaultAzureCredential), cli (az login), service "
            "(service principal JSON), or user (interactive browser). Default: from config, "
            "else default"
        ),
    )
    parser.add_argument(
        "--credentials",
        help="Path to a service principal JSON file (for --auth service).",
    )
    parser.add_argument("--subscription-id", help="Azure subscription ID.")
    parser.add_argument(
        "--config-path",
        help=f"Path to the provider YAML. Defaults to {DEFAULT_PROVIDER_CONFIG} when present.",
    )
    parser.add_argument(
        "--output",
        help="Optional path to write the result as JSON. Defaults to printing to stdout.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Assign a tag to an API operation.")
    create.add_argument("--api-operation-id", required=True, help="ID of the API operation.")
    create.add_argument("--name", required=True, help="Name of the tag.")
    create.add_argument("--display-name", help="Deprecated; has no effect on the API.")

    for command, help_text in (
        ("read", "Show the observed state of an assignment."),
        ("delete", "Detach a tag from an API operation."),
        ("import", "Adopt an existing assignment by ID."),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("--id", required=True, help="ID of the operation tag assignment.")

    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        settings = load_provider_settings(args.config_path)
        subscription_id = resolve_subscription_id(args.subscription_id, settings)
        credential = get_credentials(
            args.auth or settings.auth,
            args.credentials or settings.credentials_path,
        )
        ctx = build_provider_context(credential, subscription_id)
        resource = TagAssignmentResource(
            four_point_oh_beta=settings.four_point_oh_beta,
            timeouts=settings.timeouts,
        )

        result = run_command(args, resource, ctx)
        output = json.dumps(result, indent=2, ensure_ascii=False)

        if args.output:
            with open(args.output, "w", encoding="utf-8") as handle:
                handle.write(output)
            print(f"Wrote result to {args.output}")
        else:
            print(output)
    except RemoteCallError as error:
        print(f"API Management error: {error}")
        raise
    except Exception as error:
        print(f"Error: {error}")
        raise


if __name__ == "__main__":
    main()
