import pytest

from azdext.azure.resource_ids import (
    container_app_rid,
    get_resource_group_name,
    kubernetes_service_rid,
    resource_group_deployment_rid,
    resource_group_rid,
    spring_app_rid,
    static_web_app_rid,
    subscription_deployment_rid,
    subscription_from_rid,
    subscription_rid,
    website_rid,
)

SUB = "sub-id"
RG = "my-rg"


def test_subscription_rid_format():
    assert subscription_rid(SUB) == f"/subscriptions/{SUB}"


def test_resource_group_rid_format():
    assert resource_group_rid(SUB, RG) == f"{subscription_rid(SUB)}/resourceGroups/{RG}"


def test_subscription_deployment_rid_format():
    rid = subscription_deployment_rid(SUB, "dep")
    assert rid == f"{subscription_rid(SUB)}/providers/Microsoft.Resources/deployments/dep"


def test_resource_group_deployment_rid_format():
    rid = resource_group_deployment_rid(SUB, RG, "dep")
    assert rid == f"{resource_group_rid(SUB, RG)}/providers/Microsoft.Resources/deployments/dep"


@pytest.mark.parametrize(
    "builder, provider",
    [
        (website_rid, "Microsoft.Web/sites"),
        (container_app_rid, "Microsoft.App/containerApps"),
        (spring_app_rid, "Microsoft.AppPlatform/Spring"),
        (kubernetes_service_rid, "Microsoft.ContainerService/managedClusters"),
        (static_web_app_rid, "Microsoft.Web/staticSites"),
    ],
)
def test_resource_rids(builder, provider):
    rid = builder(SUB, RG, "res")
    assert rid == f"{resource_group_rid(SUB, RG)}/providers/{provider}/res"
    assert subscription_from_rid(rid) == SUB
    assert get_resource_group_name(rid) == RG


def test_subscription_from_rid_round_trip():
    assert subscription_from_rid(subscription_rid(SUB)) == SUB
    assert subscription_from_rid(resource_group_rid(SUB, RG)) == SUB


def test_subscription_from_rid_missing():
    with pytest.raises(ValueError, match="no subscription id"):
        subscription_from_rid("/providers/Microsoft.Web/sites/x")


def test_subscription_from_rid_trailing_segment():
    with pytest.raises(ValueError):
        subscription_from_rid("/tenants/t/subscriptions")


def test_get_resource_group_name_is_case_insensitive():
    rid = f"/subscriptions/{SUB}/RESOURCEGROUPS/{RG}/providers/x/y"
    assert get_resource_group_name(rid) == RG


def test_get_resource_group_name_needs_trailing_path():
    assert get_resource_group_name(resource_group_rid(SUB, RG)) is None


def test_get_resource_group_name_without_group():
    assert get_resource_group_name(subscription_deployment_rid(SUB, "dep")) is None