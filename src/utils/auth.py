"""Authentication helpers for the Azure Resource Manager API."""

from __future__ import annotations

import json
import os
from typing import Any

from azure.identity import (
    AzureCliCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    InteractiveBrowserCredential,
)

AUTH_METHODS = ("default", "cli", "service", "user")

_SERVICE_PRINCIPAL_FIELDS = ("tenant_id", "client_id", "client_secret")


def get_credentials(auth_method: str, credentials_path: str | None):
    """
    Return an Azure credential using a service principal, interactive login, the CLI or defaults.

    Parameters
    ----------
    auth_method:
        One of "default", "cli", "service" or "user".
    credentials_path:
        JSON file holding `tenant_id`, `client_id` and `client_secret` for
        "service"; optional `tenant_id`/`client_id` for "user". Ignored otherwise.
    """
    if auth_method == "default":
        return DefaultAzureCredential()

    if auth_method == "cli":
        return AzureCliCredential()

    if auth_method == "service":
        payload = _load_credentials_file(credentials_path)
        missing = [k for k in _SERVICE_PRINCIPAL_FIELDS if not payload.get(k)]
        if missing:
            raise ValueError(
                f"Service principal file is missing: {', '.join(missing)}",
            )
        return ClientSecretCredential(
            tenant_id=payload["tenant_id"],
            client_id=payload["client_id"],
            client_secret=payload["client_secret"],
        )

    if auth_method == "user":
        kwargs: dict[str, Any] = {}
        if credentials_path:
            payload = _load_credentials_file(credentials_path)
            for key in ("tenant_id", "client_id"):
                if payload.get(key):
                    kwargs[key] = payload[key]
        return InteractiveBrowserCredential(**kwargs)

    raise ValueError("auth must be 'default', 'cli', 'service', or 'user'")


def _load_credentials_file(path: str | None) -> dict[str, Any]:
    _ensure_credentials_file(path)
    with open(path, "r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Credentials file {path} is not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Credentials file {path} must contain a JSON object.")
    return payload


def _ensure_credentials_file(path: str | None) -> None:
    if not path or not os.path.exists(path):
        raise FileNotFoundError(
            "Credentials file not found. Provide --credentials /path/to/file.json",
        )
