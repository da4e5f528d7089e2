from datetime import datetime, timezone
from urllib.parse import unquote

import pytest

from azdext.azure.arm import ResponseError
from azdext.azure.cloud import azure_public
from azdext.azure.models import DeploymentNotFoundError, DeploymentProvisioningState
from azdext.azure.resource_ids import (
    resource_group_deployment_rid,
    resource_group_rid,
    subscription_deployment_rid,
    subscription_rid,
)
from azdext.azure.resources import ResourceService
from azdext.azure.standard_deployments import (
    OUTPUTS_URL_FRAGMENT,
    PORTAL_URL_FRAGMENT,
    StandardDeployments,
    convert_standard_provisioning_state,
)

SUB = "sub-1"
RG = "rg-1"
CLOUD = azure_public()
DEPLOYMENTS = "providers/Microsoft.Resources/deployments"


class FakeClient:
    def __init__(self, gets=None, lists=None, failures=None):
        self.gets = gets or {}
        self.lists = lists or {}
        self.failures = failures or {}
        self.calls = []

    def get(self, path, api_version, params=None):
        self.calls.append(("get", path, params))
        if path in self.failures:
            raise self.failures[path]
        return self.gets[path]

    def list(self, path, api_version, params=None):
        self.calls.append(("list", path, params))
        if path in self.failures:
            raise self.failures[path]
        yield from self.lists[path]


def deployment_body(rid, name, state="Succeeded", tags=None, timestamp="2024-01-02T03:04:05Z"):
    return {
        "id": rid,
        "name": name,
        "type": "Microsoft.Resources/deployments",
        "location": "westus2",
        "tags": tags if tags is not None else {"azd-env-name": "env1"},
        "properties": {
            "provisioningState": state,
            "timestamp": timestamp,
            "templateHash": "hash",
            "outputs": {"out": {"value": 1}},
            "outputResources": [{"id": "/res/a"}],
            "dependencies": [],
        },
    }


def make(client):
    return StandardDeployments(client, ResourceService(client), CLOUD)


def test_get_subscription_deployment_converts_fields():
    rid = subscription_deployment_rid(SUB, "dep")
    client = FakeClient(gets={rid: deployment_body(rid, "dep")})
    result = make(client).get_subscription_deployment(SUB, "dep")
    assert result.id == rid
    assert result.deployment_id == rid
    assert result.name == "dep"
    assert result.location == "westus2"
    assert result.tags == {"azd-env-name": "env1"}
    assert result.provisioning_state is DeploymentProvisioningState.SUCCEEDED
    assert result.outputs == {"out": {"value": 1}}
    assert result.resources == [{"id": "/res/a"}]
    assert result.template_hash == "hash"


def test_portal_urls_escape_the_deployment_id():
    rid = subscription_deployment_rid(SUB, "dep")
    client = FakeClient(gets={rid: deployment_body(rid, "dep")})
    result = make(client).get_subscription_deployment(SUB, "dep")
    assert result.portal_url.startswith(f"{CLOUD.portal_url_base}/{PORTAL_URL_FRAGMENT}/")
    assert result.portal_url.endswith(
        "%2Fsubscriptions%2Fsub-1%2Fproviders%2FMicrosoft.Resources%2Fdeployments%2Fdep"
    )
    assert unquote(result.portal_url.rsplit("/", 1)[1]) == rid
    assert result.outputs_url.startswith(f"{CLOUD.portal_url_base}/{OUTPUTS_URL_FRAGMENT}/")
    assert result.deployment_url == result.portal_url


def test_timestamp_with_seven_fraction_digits():
    rid = subscription_deployment_rid(SUB, "dep")
    body = deployment_body(rid, "dep", timestamp="2024-01-02T03:04:05.1234567Z")
    client = FakeClient(gets={rid: body})
    result = make(client).get_subscription_deployment(SUB, "dep")
    assert result.timestamp == datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)


def test_missing_deployment_raises_not_found():
    rid = subscription_deployment_rid(SUB, "dep")
    client = FakeClient(failures={rid: ResponseError(404)})
    with pytest.raises(DeploymentNotFoundError):
        make(client).get_subscription_deployment(SUB, "dep")


def test_other_errors_propagate():
    rid = resource_group_deployment_rid(SUB, RG, "dep")
    client = FakeClient(failures={rid: ResponseError(500)})
    with pytest.raises(ResponseError) as info:
        make(client).get_resource_group_deployment(SUB, RG, "dep")
    assert info.value.status_code == 500


def test_get_resource_group_deployment():
    rid = resource_group_deployment_rid(SUB, RG, "dep")
    client = FakeClient(gets={rid: deployment_body(rid, "dep", state="Failed")})
    result = make(client).get_resource_group_deployment(SUB, RG, "dep")
    assert result.id == rid
    assert result.provisioning_state is DeploymentProvisioningState.FAILED


def test_list_deployments_keeps_order():
    sub_path = f"{subscription_rid(SUB)}/{DEPLOYMENTS}"
    rg_path = f"{resource_group_rid(SUB, RG)}/{DEPLOYMENTS}"
    client = FakeClient(
        lists={
            sub_path: [deployment_body("/a", "a"), deployment_body("/b", "b")],
            rg_path: [deployment_body("/c", "c")],
        }
    )
    service = make(client)
    assert [d.name for d in service.list_subscription_deployments(SUB)] == ["a", "b"]
    assert [d.name for d in service.list_resource_group_deployments(SUB, RG)] == ["c"]


@pytest.mark.parametrize(
    "state",
    ["Accepted", "Canceled", "Creating", "Deleted", "Deleting", "Failed",
     "NotSpecified", "Ready", "Running", "Succeeded", "Updating"],
)
def test_known_states_convert(state):
    assert convert_standard_provisioning_state(state).value == state


@pytest.mark.parametrize("state", ["Deploying", "Waiting", "bogus", None])
def test_unknown_states_convert_to_none(state):
    assert convert_standard_provisioning_state(state) is None


def test_operations_are_listed():
    path = f"{subscription_deployment_rid(SUB, 'dep')}/operations"
    operations = [{"operationId": "1"}, {"operationId": "2"}]
    client = FakeClient(lists={path: operations})
    assert make(client).list_subscription_deployment_operations(SUB, "dep") == operations


def test_operations_not_found():
    path = f"{resource_group_deployment_rid(SUB, RG, 'dep')}/operations"
    client = FakeClient(failures={path: ResponseError(404)})
    with pytest.raises(DeploymentNotFoundError):
        make(client).list_resource_group_deployment_operations(SUB, RG, "dep")


def resource(rid):
    return {"id": rid, "name": rid.rsplit("/", 1)[1], "type": "t", "location": "l"}


def test_subscription_deployment_resources():
    rid = subscription_deployment_rid(SUB, "dep")
    groups_path = f"{subscription_rid(SUB)}/resourceGroups"
    client = FakeClient(
        gets={rid: deployment_body(rid, "dep")},
        lists={
            groups_path: [
                {"id": "/g/rg-a", "name": "rg-a", "type": "t", "location": "l"},
                {"id": "/g/rg-b", "name": "rg-b", "type": "t", "location": "l"},
            ],
            f"{resource_group_rid(SUB, 'rg-a')}/resources": [resource("/r/one")],
            f"{resource_group_rid(SUB, 'rg-b')}/resources": [resource("/r/two")],
        },
    )
    references = make(client).list_subscription_deployment_resources(SUB, "dep")
    assert [r["id"] for r in references] == [
        resource_group_rid(SUB, "rg-a"),
        "/r/one",
        resource_group_rid(SUB, "rg-b"),
        "/r/two",
    ]
    assert ("list", groups_path, {"$filter": "tagName eq 'azd-env-name' and tagValue eq 'env1'"}) in client.calls


def test_subscription_deployment_resources_needs_env_tag():
    rid = subscription_deployment_rid(SUB, "dep")
    client = FakeClient(gets={rid: deployment_body(rid, "dep", tags={})})
    with pytest.raises(LookupError, match="environment name not found"):
        make(client).list_subscription_deployment_resources(SUB, "dep")


def test_resource_group_deployment_resources():
    client = FakeClient(
        lists={f"{resource_group_rid(SUB, RG)}/resources": [resource("/r/x"), resource("/r/y")]}
    )
    references = make(client).list_resource_group_deployment_resources(SUB, RG, "dep")
    assert references == [{"id": resource_group_rid(SUB, RG)}, {"id": "/r/x"}, {"id": "/r/y"}]