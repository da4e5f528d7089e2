"""Query subscriptions, their locations and tenants.

``client`` has the ``get`` and ``list`` methods described in
:mod:`azdext.azure.resources`.
"""

from __future__ import annotations

from typing import Any

from azdext.azure.arm import ResponseError
from azdext.azure.models import Location, Subscription
from azdext.azure.resource_ids import subscription_rid
from azdext.common import to_value_with_default

_API_VERSION = "2022-12-01"


class SubscriptionsService:
    """Lists subscriptions, physical locations and tenants."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def list_subscriptions(self, tenant_id: str) -> list[dict[str, Any]]:
        """All subscriptions, sorted by display name."""
        subscriptions = list(self._client.list("/subscriptions", _API_VERSION))
        return sorted(subscriptions, key=lambda item: item["displayName"])

    def get_subscription(self, subscription_id: str, tenant_id: str) -> Subscription:
        """The subscription with ``subscription_id``, seen through ``tenant_id``."""
        try:
            data = self._client.get(subscription_rid(subscription_id), _API_VERSION)
        except ResponseError as exc:
            raise LookupError(f"failed getting subscription for '{subscription_id}'") from exc
        return Subscription(
            id=data["subscriptionId"],
            name=data["displayName"],
            tenant_id=data["tenantId"],
            user_access_tenant_id=tenant_id,
        )

    def list_subscription_locations(self, subscription_id: str, tenant_id: str) -> list[Location]:
        """The physical locations of a subscription, sorted by regional display name."""
        path = f"{subscription_rid(subscription_id)}/locations"
        locations: list[Location] = []
        for item in self._client.list(path, _API_VERSION):
            metadata = item.get("metadata") or {}
            if metadata.get("regionType") != "Physical":
                continue
            if metadata.get("physicalLocation") == "":
                continue
            display_name = to_value_with_default(item.get("displayName"), item["name"])
            regional = to_value_with_default(item.get("regionalDisplayName"), display_name)
            locations.append(
                Location(
                    name=item["name"],
                    display_name=display_name,
                    regional_display_name=regional,
                )
            )
        return sorted(locations, key=lambda location: location.regional_display_name)

    def list_tenants(self) -> list[dict[str, Any]]:
        """The tenants the user can access, sorted by display name."""
        tenants = [
            tenant
            for tenant in self._client.list("/tenants", _API_VERSION)
            if tenant is not None and tenant.get("tenantId") is not None
        ]
        return sorted(
            tenants, key=lambda tenant: to_value_with_default(tenant.get("displayName"), "")
        )