"""Provider settings for the operation tag scripts.

Settings are read from a YAML file (preferred) or from a JSON payload in
`APIM_PROVIDER_JSON`. The file may hold the settings at the top level or
under a `provider:` key:

```yaml
provider:
  subscription_id: "00000000-0000-0000-0000-000000000000"
  auth: cli
  features:
    four_point_oh_beta: false
  timeouts:
    create: 30
    read: 5
    delete: 30
```

Timeouts are minutes.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from utils.auth import AUTH_METHODS
from utils.timeouts import ResourceTimeouts

DEFAULT_PROVIDER_CONFIG = "config/provider.yaml"
PROVIDER_ENV_VAR = "APIM_PROVIDER_JSON"
SUBSCRIPTION_ENV_VAR = "ARM_SUBSCRIPTION_ID"
FOUR_POINT_OH_BETA_ENV_VAR = "ARM_FOURPOINTZERO_BETA"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ProviderSettings:
    """Resolved provider configuration."""

    subscription_id: str | None = None
    auth: str = "default"
    credentials_path: str | None = None
    four_point_oh_beta: bool = False
    timeouts: ResourceTimeouts = field(default_factory=ResourceTimeouts)


def load_provider_settings(config_path: str | None) -> ProviderSettings:
    """Load provider settings from YAML, the environment, or defaults.

    Args:
        config_path: Optional explicit YAML path. When given it must exist.

    Returns:
        Normalized `ProviderSettings`.

    Raises:
        FileNotFoundError: If `config_path` was given but does not exist.
        ValueError: If the settings are malformed.
    """
    if config_path and not Path(config_path).exists():
        raise FileNotFoundError(f"Provider config not found: {config_path}")

    mapping = _load_mapping_from_file(config_path)
    if mapping is None:
        mapping = _load_mapping_from_env()
    if mapping is None:
        mapping = {}

    return _normalize_settings(mapping)


def resolve_subscription_id(subscription_id: str | None, settings: ProviderSettings) -> str:
    """Resolve the subscription directly, via settings, or via `ARM_SUBSCRIPTION_ID`.

    Raises:
        ValueError: If no subscription can be resolved.
    """
    resolved = subscription_id or settings.subscription_id or os.getenv(SUBSCRIPTION_ENV_VAR)
    if not resolved or not str(resolved).strip():
        raise ValueError(
            "Provide --subscription-id, set subscription_id in the provider config, "
            f"or export {SUBSCRIPTION_ENV_VAR}.",
        )
    return str(resolved).strip()


def _resolve_mapping_path(config_path: str | None) -> Path | None:
    if config_path:
        return Path(config_path)

    default_path = Path(DEFAULT_PROVIDER_CONFIG)
    if default_path.exists():
        return default_path

    return None


def _load_mapping_from_file(config_path: str | None) -> dict[str, Any] | None:
    path_to_load = _resolve_mapping_path(config_path)
    if not path_to_load or not path_to_load.exists():
        return None

    with open(path_to_load, "r", encoding="utf-8") as config_file:
        raw_data = yaml.safe_load(config_file) or {}

    if not isinstance(raw_data, dict):
        raise ValueError("Provider config must be a mapping.")

    raw_mapping = raw_data.get("provider", raw_data)
    if raw_mapping is None:
        return {}
    if not isinstance(raw_mapping, dict):
        raise ValueError("Provider config must be a mapping.")
    return raw_mapping


def _load_mapping_from_env() -> dict[str, Any] | None:
    env_payload = os.getenv(PROVIDER_ENV_VAR)
    if not env_payload:
        return None

    try:
        parsed = json.loads(env_payload)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Failed to parse {PROVIDER_ENV_VAR} environment variable as JSON.",
        ) from exc

    if not isinstance(parsed, dict):
        raise ValueError(f"{PROVIDER_ENV_VAR} must contain a JSON object mapping.")
    return parsed


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in _TRUE_VALUES


def _normalize_settings(mapping: dict[str, Any]) -> ProviderSettings:
    auth = str(mapping.get("auth") or "default")
    if auth not in AUTH_METHODS:
        raise ValueError(f"auth must be one of: {', '.join(AUTH_METHODS)}")

    features = mapping.get("features") or {}
    if not isinstance(features, dict):
        raise ValueError("'features' must be a mapping.")
    beta = features.get("four_point_oh_beta")
    if beta is None:
        beta = _env_flag(FOUR_POINT_OH_BETA_ENV_VAR)
    if not isinstance(beta, bool):
        raise ValueError("'features.four_point_oh_beta' must be a boolean.")

    raw_timeouts = mapping.get("timeouts") or {}
    if not isinstance(raw_timeouts, dict):
        raise ValueError("'timeouts' must be a mapping of minutes.")

    subscription_id = mapping.get("subscription_id")
    credentials_path = mapping.get("credentials_path")
    return ProviderSettings(
        subscription_id=str(subscription_id) if subscription_id else None,
        auth=auth,
        credentials_path=str(credentials_path) if credentials_path else None,
        four_point_oh_beta=beta,
        timeouts=ResourceTimeouts().with_overrides(raw_timeouts),
    )
