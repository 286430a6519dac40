"""Dependencies handed to every lifecycle call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from azure.mgmt.apimanagement import ApiManagementClient

from utils.azure_api import TagClient


@dataclass(frozen=True)
class ProviderContext:
    """Client handle plus the subscription the resource ids are built in."""

    tag_client: TagClient
    subscription_id: str


def build_provider_context(credential: Any, subscription_id: str) -> ProviderContext:
    """Create the API Management client for `subscription_id`."""
    apim_client = ApiManagementClient(credential, subscription_id)
    return ProviderContext(tag_client=TagClient(apim_client), subscription_id=subscription_id)
