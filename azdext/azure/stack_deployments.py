"""Deployment stacks at subscription and resource group scope.

``client`` has the ``get`` and ``list`` methods described in
:mod:`azdext.azure.resources`. Lookups that find no deployment stack fall
back to the standard deployments service.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import quote

from azdext.azure.cloud import Cloud
from azdext.azure.models import (
    DeploymentNotFoundError,
    DeploymentProvisioningState,
    ResourceDeployment,
)
from azdext.azure.resource_ids import resource_group_rid, subscription_rid
from azdext.azure.standard_deployments import (
    PORTAL_URL_FRAGMENT,
    StandardDeployments,
    _parse_timestamp,
)
from azdext.common import to_value_with_default
from azdext.errors import ErrorWithSuggestion

logger = logging.getLogger(__name__)

DEPLOYMENT_STACKS_CONFIG_KEY = "DeploymentStacks"
STACKS_PORTAL_URL_FRAGMENT = "#@microsoft.onmicrosoft.com/resource"
BYPASS_OUT_OF_SYNC_ERROR_ENV_VAR_NAME = "DEPLOYMENT_STACKS_BYPASS_STACK_OUT_OF_SYNC_ERROR"

_API_VERSION = "2024-03-01"
_STACKS = "providers/Microsoft.Resources/deploymentStacks"
_MISSING_DEPLOYMENT_ID = "deployment stack is missing ARM deployment id"

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_STACK_STATES = {
    "canceled": DeploymentProvisioningState.CANCELED,
    "canceling": DeploymentProvisioningState.CANCELING,
    "creating": DeploymentProvisioningState.CREATING,
    "deleting": DeploymentProvisioningState.DELETING,
    "deletingResources": DeploymentProvisioningState.DELETING_RESOURCES,
    "deploying": DeploymentProvisioningState.DEPLOYING,
    "failed": DeploymentProvisioningState.FAILED,
    "succeeded": DeploymentProvisioningState.SUCCEEDED,
    "updatingDenyAssignments": DeploymentProvisioningState.UPDATING_DENY_ASSIGNMENTS,
    "validating": DeploymentProvisioningState.VALIDATING,
    "waiting": DeploymentProvisioningState.WAITING,
}


def _default_action_on_unmanage() -> dict[str, str]:
    return {"managementGroups": "delete", "resourceGroups": "delete", "resources": "delete"}


def _default_deny_settings() -> dict[str, Any]:
    return {"mode": "none"}


@dataclass
class DeploymentStackOptions:
    """Settings applied when deploying a stack."""

    bypass_stack_out_of_sync_error: Optional[bool] = False
    action_on_unmanage: Optional[dict[str, Any]] = field(default_factory=_default_action_on_unmanage)
    deny_settings: Optional[dict[str, Any]] = field(default_factory=_default_deny_settings)


def _parse_bool(text: str) -> bool:
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value {text!r}")


def _parse_section(section: Any) -> DeploymentStackOptions:
    if not isinstance(section, Mapping):
        raise ValueError(f"expected an object, got {type(section).__name__}")

    bypass = section.get("bypassStackOutOfSyncError")
    if bypass is not None and not isinstance(bypass, bool):
        raise ValueError("'bypassStackOutOfSyncError' must be a boolean")

    action = section.get("actionOnUnmanage")
    if action is not None and not isinstance(action, Mapping):
        raise ValueError("'actionOnUnmanage' must be an object")

    deny = section.get("denySettings")
    if deny is not None and not isinstance(deny, Mapping):
        raise ValueError("'denySettings' must be an object")

    return DeploymentStackOptions(
        bypass_stack_out_of_sync_error=bypass,
        action_on_unmanage=dict(action) if action is not None else None,
        deny_settings=dict(deny) if deny is not None else None,
    )


def parse_deployment_stack_options(
    options: Optional[Mapping[str, Any]],
) -> DeploymentStackOptions:
    """Read stack options from the ``DeploymentStacks`` section of ``options``.

    Missing settings take the defaults: no out-of-sync bypass, delete all
    unmanaged resources, and no deny settings. The bypass flag is read from
    the environment only.
    """
    env_value = os.environ.get(BYPASS_OUT_OF_SYNC_ERROR_ENV_VAR_NAME)
    has_env = env_value is not None

    if options is None and not has_env:
        return DeploymentStackOptions()

    section = (options or {}).get(DEPLOYMENT_STACKS_CONFIG_KEY)
    parsed: Optional[DeploymentStackOptions] = None
    if section is not None:
        try:
            parsed = _parse_section(section)
        except ValueError as exc:
            raise ErrorWithSuggestion(
                ValueError(f"failed parsing deployment stack options: {exc}"),
                "Review the 'infra.deploymentStacks' configuration section in the 'azure.yaml' file.",
            ) from exc

    if not has_env and parsed is None:
        return DeploymentStackOptions()

    if parsed is None:
        parsed = DeploymentStackOptions()

    if env_value is not None:
        try:
            parsed.bypass_stack_out_of_sync_error = _parse_bool(env_value)
        except ValueError:
            logger.warning(
                "Failed to parse environment variable '%s' value '%s' as a boolean. "
                "Defaulting to false.",
                BYPASS_OUT_OF_SYNC_ERROR_ENV_VAR_NAME,
                env_value,
            )

    if parsed.bypass_stack_out_of_sync_error is None:
        parsed.bypass_stack_out_of_sync_error = False
    if parsed.action_on_unmanage is None:
        parsed.action_on_unmanage = _default_action_on_unmanage()
    if parsed.deny_settings is None:
        parsed.deny_settings = _default_deny_settings()

    return parsed


def convert_stacks_provisioning_state(
    state: Union[str, None],
) -> Optional[DeploymentProvisioningState]:
    """The provisioning state of a deployment stack, or None when it is unknown."""
    if state is None:
        return None
    return _STACK_STATES.get(str(state))


def _base_name(path: str) -> str:
    trimmed = path.rstrip("/")
    if not trimmed:
        return "/" if path else "."
    return trimmed.rsplit("/", 1)[-1]


class StackDeployments:
    """Reads deployment stacks, falling back to standard deployments."""

    def __init__(
        self,
        client: Any,
        standard_deployments: StandardDeployments,
        cloud: Cloud,
        *,
        retry_interval: float = 5.0,
        max_retry_duration: float = 600.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._standard = standard_deployments
        self._cloud = cloud
        self._retry_interval = retry_interval
        self._max_retry_duration = max_retry_duration
        self._sleep = sleep
        self._clock = clock

    def list_subscription_deployments(self, subscription_id: str) -> list[ResourceDeployment]:
        """All deployment stacks at subscription scope."""
        path = f"{subscription_rid(subscription_id)}/{_STACKS}"
        return [self._convert(item) for item in self._client.list(path, _API_VERSION)]

    def get_subscription_deployment(
        self, subscription_id: str, deployment_name: str
    ) -> ResourceDeployment:
        """The subscription level stack, or the standard deployment of that name."""
        path = f"{subscription_rid(subscription_id)}/{_STACKS}/{deployment_name}"
        stack = self._get_stack(path)
        if stack is None:
            return self._standard.get_subscription_deployment(subscription_id, deployment_name)
        return self._convert(stack)

    def list_resource_group_deployments(
        self, subscription_id: str, resource_group_name: str
    ) -> list[ResourceDeployment]:
        """All deployment stacks in a resource group."""
        path = f"{resource_group_rid(subscription_id, resource_group_name)}/{_STACKS}"
        return [self._convert(item) for item in self._client.list(path, _API_VERSION)]

    def get_resource_group_deployment(
        self, subscription_id: str, resource_group_name: str, deployment_name: str
    ) -> ResourceDeployment:
        """The resource group level stack, or the standard deployment of that name."""
        base = resource_group_rid(subscription_id, resource_group_name)
        stack = self._get_stack(f"{base}/{_STACKS}/{deployment_name}")
        if stack is None:
            return self._standard.get_resource_group_deployment(
                subscription_id, resource_group_name, deployment_name
            )
        return self._convert(stack)

    def list_subscription_deployment_operations(
        self, subscription_id: str, deployment_name: str
    ) -> list[dict[str, Any]]:
        """The operations of the deployment behind a subscription level stack."""
        try:
            deployment: Optional[ResourceDeployment] = self.get_subscription_deployment(
                subscription_id, deployment_name
            )
        except DeploymentNotFoundError:
            deployment = None

        if deployment is not None and deployment.deployment_id:
            deployment_name = _base_name(deployment.deployment_id)

        return self._standard.list_subscription_deployment_operations(
            subscription_id, deployment_name
        )

    def list_resource_group_deployment_operations(
        self, subscription_id: str, resource_group_name: str, deployment_name: str
    ) -> list[dict[str, Any]]:
        """The operations of the deployment behind a resource group level stack.

        The name may be an inner deployment that is no stack; it is then used as is.
        """
        try:
            deployment: Optional[ResourceDeployment] = self.get_resource_group_deployment(
                subscription_id, resource_group_name, deployment_name
            )
        except DeploymentNotFoundError:
            deployment = None

        if deployment is not None and deployment.deployment_id:
            deployment_name = _base_name(deployment.deployment_id)

        return self._standard.list_resource_group_deployment_operations(
            subscription_id, resource_group_name, deployment_name
        )

    def _get_stack(self, path: str) -> Optional[dict[str, Any]]:
        """The stack at ``path``, None when it cannot be read.

        Waits while the stack has no deployment id yet.
        """
        deadline = self._clock() + self._max_retry_duration
        while True:
            try:
                stack = self._client.get(path, _API_VERSION)
            except Exception:  # any failure means: look for a standard deployment
                return None

            properties = stack.get("properties") or {}
            if properties.get("deploymentId") is not None:
                return stack

            if self._clock() + self._retry_interval > deadline:
                raise TimeoutError(_MISSING_DEPLOYMENT_ID)
            self._sleep(self._retry_interval)

    def _convert(self, data: dict[str, Any]) -> ResourceDeployment:
        properties = data.get("properties") or {}
        system_data = data.get("systemData") or {}
        stack_id = data["id"]
        deployment_id = to_value_with_default(properties.get("deploymentId"), "")
        base = self._cloud.portal_url_base
        return ResourceDeployment(
            id=stack_id,
            name=data["name"],
            type=data["type"],
            location=to_value_with_default(data.get("location"), ""),
            deployment_id=deployment_id,
            tags=dict(data.get("tags") or {}),
            outputs=properties.get("outputs"),
            timestamp=_parse_timestamp(system_data.get("lastModifiedAt")),
            resources=[{"id": item.get("id")} for item in properties.get("resources") or []],
            dependencies=[],
            provisioning_state=convert_stacks_provisioning_state(
                properties.get("provisioningState")
            ),
            portal_url=f"{base}/{STACKS_PORTAL_URL_FRAGMENT}/{stack_id}",
            outputs_url=f"{base}/{STACKS_PORTAL_URL_FRAGMENT}/{stack_id}/outputs",
            deployment_url=(
                f"{base}/{PORTAL_URL_FRAGMENT}/{quote(deployment_id, safe='$&+:=@')}"
            ),
        )