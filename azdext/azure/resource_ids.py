"""Build and inspect Azure resource ids."""

from __future__ import annotations

import re
from typing import Optional

_RESOURCE_GROUP_PATTERN = re.compile(r"/.+/(?i:resourceGroups/(.+?)/.+)")


def subscription_from_rid(rid: str) -> str:
    """The subscription id component of a resource id.

    Raises ValueError when the id holds no subscription.
    """
    parts = rid.split("/")
    for part, following in zip(parts, parts[1:]):
        if part == "subscriptions":
            return following
    raise ValueError(f"no subscription id component in {rid}")


def subscription_rid(subscription_id: str) -> str:
    """The resource id of a subscription."""
    return f"/subscriptions/{subscription_id}"


def subscription_deployment_rid(subscription_id: str, deployment_id: str) -> str:
    """The resource id of a subscription level deployment."""
    return f"{subscription_rid(subscription_id)}/providers/Microsoft.Resources/deployments/{deployment_id}"


def resource_group_deployment_rid(
    subscription_id: str, resource_group_name: str, deployment_id: str
) -> str:
    """The resource id of a resource group level deployment."""
    base = resource_group_rid(subscription_id, resource_group_name)
    return f"{base}/providers/Microsoft.Resources/deployments/{deployment_id}"


def resource_group_rid(subscription_id: str, resource_group_name: str) -> str:
    """The resource id of a resource group."""
    return f"{subscription_rid(subscription_id)}/resourceGroups/{resource_group_name}"


def _in_group(subscription_id: str, resource_group_name: str, provider_path: str, name: str) -> str:
    base = resource_group_rid(subscription_id, resource_group_name)
    return f"{base}/providers/{provider_path}/{name}"


def website_rid(subscription_id: str, resource_group_name: str, website_name: str) -> str:
    """The resource id of a web site."""
    return _in_group(subscription_id, resource_group_name, "Microsoft.Web/sites", website_name)


def container_app_rid(subscription_id: str, resource_group_name: str, container_app_name: str) -> str:
    """The resource id of a container app."""
    return _in_group(
        subscription_id, resource_group_name, "Microsoft.App/containerApps", container_app_name
    )


def spring_app_rid(subscription_id: str, resource_group_name: str, spring_app_name: str) -> str:
    """The resource id of a Spring app."""
    return _in_group(
        subscription_id, resource_group_name, "Microsoft.AppPlatform/Spring", spring_app_name
    )


def kubernetes_service_rid(subscription_id: str, resource_group_name: str, cluster_name: str) -> str:
    """The resource id of a managed Kubernetes cluster."""
    return _in_group(
        subscription_id,
        resource_group_name,
        "Microsoft.ContainerService/managedClusters",
        cluster_name,
    )


def static_web_app_rid(subscription_id: str, resource_group_name: str, static_site_name: str) -> str:
    """The resource id of a static web app."""
    return _in_group(
        subscription_id, resource_group_name, "Microsoft.Web/staticSites", static_site_name
    )


def get_resource_group_name(resource_id: str) -> Optional[str]:
    """The resource group named in a resource id, or None when there is none."""
    match = _RESOURCE_GROUP_PATTERN.search(resource_id)
    if match is None:
        return None
    return match.group(1)