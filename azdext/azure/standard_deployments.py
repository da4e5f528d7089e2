"""Standard resource manager deployments at subscription and resource group scope.

``client`` has the ``get`` and ``list`` methods described in
:mod:`azdext.azure.resources`.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional, Union
from urllib.parse import quote

from azdext.azure.arm import ResponseError
from azdext.azure.cloud import Cloud
from azdext.azure.models import (
    DeploymentNotFoundError,
    DeploymentProvisioningState,
    ResourceDeployment,
)
from azdext.azure.resource_ids import (
    resource_group_deployment_rid,
    resource_group_rid,
    subscription_deployment_rid,
    subscription_rid,
)
from azdext.azure.resources import Filter, ListResourceGroupOptions, ResourceService
from azdext.common import to_value_with_default

# Maximum length of the name of a deployment.
ARM_DEPLOYMENT_NAME_LENGTH_MAX = 64
PORTAL_URL_FRAGMENT = "#view/HubsExtension/DeploymentDetailsBlade/~/overview/id"
OUTPUTS_URL_FRAGMENT = "#view/HubsExtension/DeploymentDetailsBlade/~/outputs/id"
ENV_NAME_TAG = "azd-env-name"

_API_VERSION = "2021-04-01"
_DEPLOYMENTS = "providers/Microsoft.Resources/deployments"
_NOT_FOUND = 404

_STANDARD_STATES = {
    state.value: state
    for state in (
        DeploymentProvisioningState.ACCEPTED,
        DeploymentProvisioningState.CANCELED,
        DeploymentProvisioningState.CREATING,
        DeploymentProvisioningState.DELETED,
        DeploymentProvisioningState.DELETING,
        DeploymentProvisioningState.FAILED,
        DeploymentProvisioningState.NOT_SPECIFIED,
        DeploymentProvisioningState.READY,
        DeploymentProvisioningState.RUNNING,
        DeploymentProvisioningState.SUCCEEDED,
        DeploymentProvisioningState.UPDATING,
    )
}

_FRACTION = re.compile(r"^(.*T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(.*)$")


def convert_standard_provisioning_state(
    state: Union[str, DeploymentProvisioningState, None],
) -> Optional[DeploymentProvisioningState]:
    """The provisioning state of a standard deployment, or None when it is unknown."""
    if state is None:
        return None
    return _STANDARD_STATES.get(str(state))


def _path_escape(value: str) -> str:
    return quote(value, safe="$&+:=@")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    match = _FRACTION.match(text)
    if match is not None:
        base, fraction, rest = match.groups()
        if fraction:
            text = f"{base}.{fraction[:6].ljust(6, '0')}{rest}"
        else:
            text = f"{base}{rest}"
    return datetime.fromisoformat(text)


def _is_not_found(exc: ResponseError) -> bool:
    return exc.status_code == _NOT_FOUND


class StandardDeployments:
    """Reads standard deployments and their operations and resources."""

    def __init__(self, client: Any, resource_service: ResourceService, cloud: Cloud) -> None:
        self._client = client
        self._resource_service = resource_service
        self._cloud = cloud

    def list_subscription_deployments(self, subscription_id: str) -> list[ResourceDeployment]:
        """All deployments at subscription scope."""
        path = f"{subscription_rid(subscription_id)}/{_DEPLOYMENTS}"
        return [self._convert(item) for item in self._client.list(path, _API_VERSION)]

    def get_subscription_deployment(
        self, subscription_id: str, deployment_name: str
    ) -> ResourceDeployment:
        """The subscription level deployment named ``deployment_name``."""
        return self._get(subscription_deployment_rid(subscription_id, deployment_name), deployment_name)

    def list_resource_group_deployments(
        self, subscription_id: str, resource_group_name: str
    ) -> list[ResourceDeployment]:
        """All deployments in a resource group."""
        path = f"{resource_group_rid(subscription_id, resource_group_name)}/{_DEPLOYMENTS}"
        return [self._convert(item) for item in self._client.list(path, _API_VERSION)]

    def get_resource_group_deployment(
        self, subscription_id: str, resource_group_name: str, deployment_name: str
    ) -> ResourceDeployment:
        """The resource group level deployment named ``deployment_name``."""
        path = resource_group_deployment_rid(subscription_id, resource_group_name, deployment_name)
        return self._get(path, deployment_name)

    def list_subscription_deployment_operations(
        self, subscription_id: str, deployment_name: str
    ) -> list[dict[str, Any]]:
        """The operations of a subscription level deployment."""
        path = f"{subscription_deployment_rid(subscription_id, deployment_name)}/operations"
        return self._list_operations(path, deployment_name)

    def list_resource_group_deployment_operations(
        self, subscription_id: str, resource_group_name: str, deployment_name: str
    ) -> list[dict[str, Any]]:
        """The operations of a resource group level deployment."""
        base = resource_group_deployment_rid(subscription_id, resource_group_name, deployment_name)
        return self._list_operations(f"{base}/operations", deployment_name)

    def list_subscription_deployment_resources(
        self, subscription_id: str, deployment_name: str
    ) -> list[dict[str, str]]:
        """The resource groups tagged with the deployment's environment, and their resources."""
        deployment = self.get_subscription_deployment(subscription_id, deployment_name)

        env_name = deployment.tags.get(ENV_NAME_TAG)
        if env_name is None:
            raise LookupError("environment name not found in deployment tags")

        groups = self._resource_service.list_resource_group(
            subscription_id,
            ListResourceGroupOptions(tag_filter=Filter(key=ENV_NAME_TAG, value=env_name)),
        )

        references: list[dict[str, str]] = []
        for group in groups:
            references.extend(
                self.list_resource_group_deployment_resources(
                    subscription_id, group.name, deployment_name
                )
            )
        return references

    def list_resource_group_deployment_resources(
        self, subscription_id: str, resource_group_name: str, deployment_name: str
    ) -> list[dict[str, str]]:
        """The resource group followed by every resource in it."""
        resources = self._resource_service.list_resource_group_resources(
            subscription_id, resource_group_name
        )
        references = [{"id": resource_group_rid(subscription_id, resource_group_name)}]
        references.extend({"id": resource.id} for resource in resources)
        return references

    def _get(self, path: str, deployment_name: str) -> ResourceDeployment:
        try:
            body = self._client.get(path, _API_VERSION)
        except ResponseError as exc:
            if _is_not_found(exc):
                raise DeploymentNotFoundError(deployment_name) from exc
            raise
        return self._convert(body)

    def _list_operations(self, path: str, deployment_name: str) -> list[dict[str, Any]]:
        try:
            return list(self._client.list(path, _API_VERSION))
        except ResponseError as exc:
            if _is_not_found(exc):
                raise DeploymentNotFoundError(deployment_name) from exc
            raise

    def _convert(self, data: dict[str, Any]) -> ResourceDeployment:
        properties = data.get("properties") or {}
        deployment_id = data["id"]
        escaped = _path_escape(deployment_id)
        base = self._cloud.portal_url_base
        return ResourceDeployment(
            id=deployment_id,
            name=data["name"],
            type=data["type"],
            location=to_value_with_default(data.get("location"), ""),
            deployment_id=deployment_id,
            tags=dict(data.get("tags") or {}),
            outputs=properties.get("outputs"),
            template_hash=properties.get("templateHash"),
            timestamp=_parse_timestamp(properties.get("timestamp")),
            resources=list(properties.get("outputResources") or []),
            dependencies=list(properties.get("dependencies") or []),
            provisioning_state=convert_standard_provisioning_state(
                properties.get("provisioningState")
            ),
            portal_url=f"{base}/{PORTAL_URL_FRAGMENT}/{escaped}",
            outputs_url=f"{base}/{OUTPUTS_URL_FRAGMENT}/{escaped}",
            deployment_url=f"{base}/{PORTAL_URL_FRAGMENT}/{escaped}",
        )