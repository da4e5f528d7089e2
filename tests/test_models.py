from datetime import datetime, timezone

import pytest

from azdext.azure.models import (
    DeploymentNotFoundError,
    DeploymentProvisioningState,
    Location,
    Resource,
    ResourceDeployment,
    ResourceExtended,
    ResourceGroup,
    ResourceType,
    Subscription,
)


def test_resource_type_lookup_by_value():
    assert ResourceType("Microsoft.Web/sites") is ResourceType.WEB_SITE
    assert str(ResourceType.KEY_VAULT) == "Microsoft.KeyVault/vaults"


def test_resource_type_compares_with_string():
    resource_type = ResourceType("Microsoft.App/containerApps")
    assert resource_type is ResourceType.CONTAINER_APP
    assert resource_type == "Microsoft.App/containerApps"


def test_resource_type_values_unique():
    for member in ResourceType:
        assert ResourceType(member.value) is member


def test_provisioning_state_values():
    assert DeploymentProvisioningState("Succeeded") is DeploymentProvisioningState.SUCCEEDED
    assert str(DeploymentProvisioningState.DELETING_RESOURCES) == "DeletingResources"


def test_provisioning_state_unknown_raises():
    with pytest.raises(ValueError):
        DeploymentProvisioningState("Bogus")


def test_deployment_not_found_error_message():
    assert str(DeploymentNotFoundError()) == "deployment not found"
    error = DeploymentNotFoundError("'dep' in subscription 'sub'")
    assert str(error).startswith("deployment not found: ")
    assert error.detail == "'dep' in subscription 'sub'"
    assert isinstance(error, LookupError)


def test_subscription_to_dict_omits_default_flag():
    sub = Subscription(id="s", name="n", tenant_id="t", user_access_tenant_id="u")
    data = sub.to_dict()
    assert data == {"id": "s", "name": "n", "tenantId": "t", "userAccessTenantId": "u"}


def test_subscription_to_dict_includes_default_flag():
    sub = Subscription(id="s", name="n", tenant_id="t", is_default=True)
    assert sub.to_dict()["isDefault"] is True


def test_location_to_dict():
    location = Location(name="westus2", display_name="West US 2", regional_display_name="(US) West US 2")
    assert location.to_dict() == {
        "name": "westus2",
        "displayName": "West US 2",
        "regionalDisplayName": "(US) West US 2",
    }


def test_resource_group_to_dict():
    group = ResourceGroup(id="i", name="n", location="l")
    assert group.to_dict() == {"id": "i", "name": "n", "location": "l"}


def test_resource_extended_flattens_resource_fields():
    resource = ResourceExtended(id="i", name="n", type="t", location="l", kind="k")
    data = resource.to_dict()
    assert data == {**Resource(id="i", name="n", type="t", location="l").to_dict(), "kind": "k"}
    assert isinstance(resource, Resource)


def test_resource_deployment_defaults():
    deployment = ResourceDeployment(id="i", name="n", type="t")
    assert deployment.tags == {}
    assert deployment.resources == []
    assert deployment.provisioning_state is None
    other = ResourceDeployment(id="i", name="n", type="t")
    other.tags["a"] = "b"
    assert deployment.tags == {}


def test_resource_deployment_holds_values():
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    deployment = ResourceDeployment(
        id="i",
        name="n",
        type="t",
        timestamp=stamp,
        provisioning_state=DeploymentProvisioningState.FAILED,
    )
    assert deployment.timestamp == stamp
    assert deployment.provisioning_state == "Failed"