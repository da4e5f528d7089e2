"""Data types describing Azure subscriptions, resources and deployments."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class ResourceType(str, Enum):
    """Well known Azure resource types."""

    APIM = "Microsoft.ApiManagement/service"
    APP_CONFIG = "Microsoft.AppConfiguration/configurationStores"
    APP_INSIGHT_COMPONENT = "Microsoft.Insights/components"
    CACHE_FOR_REDIS = "Microsoft.Cache/redis"
    CDN_PROFILE = "Microsoft.Cdn/profiles"
    COSMOS_DB = "Microsoft.DocumentDB/databaseAccounts"
    CONTAINER_APP = "Microsoft.App/containerApps"
    SPRING_APP = "Microsoft.AppPlatform/Spring"
    CONTAINER_APP_ENVIRONMENT = "Microsoft.App/managedEnvironments"
    DEPLOYMENT = "Microsoft.Resources/deployments"
    KEY_VAULT = "Microsoft.KeyVault/vaults"
    MANAGED_HSM = "Microsoft.KeyVault/managedHSMs"
    LOAD_TEST = "Microsoft.LoadTestService/loadTests"
    LOG_ANALYTICS_WORKSPACE = "Microsoft.OperationalInsights/workspaces"
    PORTAL_DASHBOARD = "Microsoft.Portal/dashboards"
    POSTGRE_SQL_SERVER = "Microsoft.DBforPostgreSQL/flexibleServers"
    MY_SQL_SERVER = "Microsoft.DBforMySQL/flexibleServers"
    RESOURCE_GROUP = "Microsoft.Resources/resourceGroups"
    STORAGE_ACCOUNT = "Microsoft.Storage/storageAccounts"
    STATIC_WEB_SITE = "Microsoft.Web/staticSites"
    SERVICE_BUS_NAMESPACE = "Microsoft.ServiceBus/namespaces"
    SERVICE_PLAN = "Microsoft.Web/serverfarms"
    SQL_SERVER = "Microsoft.Sql/servers"
    VIRTUAL_NETWORK = "Microsoft.Network/virtualNetworks"
    WEB_SITE = "Microsoft.Web/sites"
    CONTAINER_REGISTRY = "Microsoft.ContainerRegistry/registries"
    MANAGED_CLUSTER = "Microsoft.ContainerService/managedClusters"
    AGENT_POOL = "Microsoft.ContainerService/managedClusters/agentPools"
    COGNITIVE_SERVICE_ACCOUNT = "Microsoft.CognitiveServices/accounts"
    SEARCH_SERVICE = "Microsoft.Search/searchServices"
    VIDEO_INDEXER = "Microsoft.VideoIndexer/accounts"
    PRIVATE_ENDPOINT = "Microsoft.Network/privateEndpoints"
    DEV_CENTER = "Microsoft.DevCenter/devcenters"
    DEV_CENTER_PROJECT = "Microsoft.DevCenter/projects"
    MACHINE_LEARNING_WORKSPACE = "Microsoft.MachineLearningServices/workspaces"
    MACHINE_LEARNING_CONNECTION = "Microsoft.MachineLearningServices/workspaces/connections"
    MACHINE_LEARNING_ENDPOINT = "Microsoft.MachineLearningServices/workspaces/onlineEndpoints"
    COGNITIVE_SERVICE_ACCOUNT_DEPLOYMENT = "Microsoft.CognitiveServices/accounts/deployments"

    def __str__(self) -> str:
        return self.value


class DeploymentProvisioningState(str, Enum):
    """The provisioning state of a deployment."""

    ACCEPTED = "Accepted"
    CANCELED = "Canceled"
    CANCELING = "Canceling"
    CREATING = "Creating"
    DELETED = "Deleted"
    DELETING = "Deleting"
    DELETING_RESOURCES = "DeletingResources"
    DEPLOYING = "Deploying"
    FAILED = "Failed"
    NOT_SPECIFIED = "NotSpecified"
    READY = "Ready"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    UPDATING_DENY_ASSIGNMENTS = "UpdatingDenyAssignments"
    VALIDATING = "Validating"
    WAITING = "Waiting"
    UPDATING = "Updating"

    def __str__(self) -> str:
        return self.value


class DeploymentNotFoundError(LookupError):
    """Raised when a deployment cannot be found."""

    MESSAGE = "deployment not found"

    def __init__(self, detail: str = "") -> None:
        message = f"{self.MESSAGE}: {detail}" if detail else self.MESSAGE
        super().__init__(message)
        self.detail = detail


@dataclass
class Subscription:
    """An Azure subscription."""

    id: str
    name: str
    tenant_id: str
    # The tenant under which the user has access to the subscription.
    user_access_tenant_id: str = ""
    is_default: bool = False

    def to_dict(self) -> dict[str, Any]:
        """The JSON representation."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "tenantId": self.tenant_id,
            "userAccessTenantId": self.user_access_tenant_id,
        }
        if self.is_default:
            data["isDefault"] = True
        return data


@dataclass
class Location:
    """A physical Azure location."""

    name: str
    display_name: str
    regional_display_name: str

    def to_dict(self) -> dict[str, Any]:
        """The JSON representation."""
        return {
            "name": self.name,
            "displayName": self.display_name,
            "regionalDisplayName": self.regional_display_name,
        }


@dataclass
class ResourceGroup:
    """An Azure resource group."""

    id: str
    name: str
    location: str

    def to_dict(self) -> dict[str, Any]:
        """The JSON representation."""
        return {"id": self.id, "name": self.name, "location": self.location}


@dataclass
class Resource:
    """An Azure resource."""

    id: str
    name: str
    type: str
    location: str

    def to_dict(self) -> dict[str, Any]:
        """The JSON representation."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "location": self.location,
        }


@dataclass
class ResourceExtended(Resource):
    """An Azure resource together with its kind."""

    kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON representation, with the resource fields flattened in."""
        data = super().to_dict()
        data["kind"] = self.kind
        return data


@dataclass
class ResourceDeployment:
    """A deployment, whether a standard deployment or a deployment stack."""

    # Resource id of the deployment operation.
    id: str
    name: str
    type: str
    location: str = ""
    # Resource id of the actual deployment object.
    deployment_id: str = ""
    tags: dict[str, Optional[str]] = field(default_factory=dict)
    outputs: Any = None
    template_hash: Optional[str] = None
    timestamp: Optional[datetime] = None
    resources: list[Any] = field(default_factory=list)
    dependencies: list[Any] = field(default_factory=list)
    provisioning_state: Optional[DeploymentProvisioningState] = None
    portal_url: str = ""
    outputs_url: str = ""
    deployment_url: str = ""