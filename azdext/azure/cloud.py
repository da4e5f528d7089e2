"""Azure cloud definitions and cloud configuration parsing."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

CONFIG_PATH = "cloud"

AZURE_PUBLIC_NAME = "AzureCloud"
AZURE_CHINA_CLOUD_NAME = "AzureChinaCloud"
AZURE_US_GOVERNMENT_NAME = "AzureUSGovernment"


@dataclass(frozen=True)
class CloudConfiguration:
    """Authentication and management endpoints of a cloud."""

    active_directory_authority_host: str
    resource_manager_endpoint: str
    resource_manager_audience: str


@dataclass(frozen=True)
class Cloud:
    """A cloud environment and its well known endpoints."""

    configuration: CloudConfiguration
    # Base URL of the cloud's portal.
    portal_url_base: str
    # Suffix of the cloud's storage endpoints.
    storage_endpoint_suffix: str
    # Suffix of the cloud's container registry endpoints.
    container_registry_endpoint_suffix: str


@dataclass
class CloudConfig:
    """User configuration selecting a cloud by name."""

    name: str = ""


def azure_public() -> Cloud:
    """The Azure public cloud."""
    return Cloud(
        configuration=CloudConfiguration(
            active_directory_authority_host="https://login.microsoftonline.com/",
            resource_manager_endpoint="https://management.azure.com",
            resource_manager_audience="https://management.core.windows.net/",
        ),
        portal_url_base="https://portal.azure.com",
        storage_endpoint_suffix="core.windows.net",
        container_registry_endpoint_suffix="azurecr.io",
    )


def azure_government() -> Cloud:
    """The Azure US Government cloud."""
    return Cloud(
        configuration=CloudConfiguration(
            active_directory_authority_host="https://login.microsoftonline.us/",
            resource_manager_endpoint="https://management.usgovcloudapi.net",
            resource_manager_audience="https://management.core.usgovcloudapi.net",
        ),
        portal_url_base="https://portal.azure.us",
        storage_endpoint_suffix="core.usgovcloudapi.net",
        container_registry_endpoint_suffix="azurecr.us",
    )


def azure_china() -> Cloud:
    """The Azure China cloud."""
    return Cloud(
        configuration=CloudConfiguration(
            active_directory_authority_host="https://login.chinacloudapi.cn/",
            resource_manager_endpoint="https://management.chinacloudapi.cn",
            resource_manager_audience="https://management.core.chinacloudapi.cn",
        ),
        portal_url_base="https://portal.azure.cn",
        storage_endpoint_suffix="core.chinacloudapi.cn",
        container_registry_endpoint_suffix="azurecr.cn",
    )


_CLOUDS = {
    AZURE_PUBLIC_NAME: azure_public,
    "": azure_public,
    AZURE_CHINA_CLOUD_NAME: azure_china,
    AZURE_US_GOVERNMENT_NAME: azure_government,
}


def new_cloud(config: CloudConfig) -> Cloud:
    """The cloud named by ``config``; an empty name means the public cloud."""
    try:
        factory = _CLOUDS[config.name]
    except KeyError:
        raise ValueError(f"Cloud name '{config.name}' not found.") from None
    return factory()


def _find_name(data: dict[str, Any]) -> Any:
    if "name" in data:
        return data["name"]
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == "name":
            return value
    return None


def parse_cloud_config(partial_config: Any) -> Optional[CloudConfig]:
    """Build a CloudConfig from loosely typed configuration data.

    Returns None when ``partial_config`` is None.
    """
    if isinstance(partial_config, CloudConfig):
        return CloudConfig(name=partial_config.name)

    try:
        encoded = json.dumps(partial_config)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"failed to marshal cloud configuration: {exc}") from exc

    decoded = json.loads(encoded)
    if decoded is None:
        return None
    if not isinstance(decoded, dict):
        raise ValueError(
            "failed to unmarshal cloud configuration: expected an object, "
            f"got {type(decoded).__name__}"
        )

    name = _find_name(decoded)
    if name is None:
        return CloudConfig()
    if not isinstance(name, str):
        raise ValueError(
            "failed to unmarshal cloud configuration: "
            f"field 'name' must be a string, got {type(name).__name__}"
        )
    return CloudConfig(name=name)