"""Query and manage resource groups and resources.

The services talk to the resource manager through a client object with these
methods, which raise ResponseError on a failed request:

- ``get(path, api_version, params=None)`` returns the decoded JSON body;
- ``list(path, api_version, params=None)`` yields the items of every page;
- ``put(path, api_version, body)`` returns the decoded JSON body;
- ``delete(path, api_version)`` returns once the deletion has finished.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from azdext.azure.arm import ArmResourceId, parse_resource_id
from azdext.azure.models import Resource, ResourceExtended, ResourceGroup
from azdext.azure.resource_ids import resource_group_rid, subscription_rid
from azdext.common import to_value_with_default

_API_VERSION = "2021-04-01"


@dataclass
class Filter:
    """A tag filter."""

    key: str
    value: str


@dataclass
class ListResourceGroupOptions:
    """Optional parameters for listing resource groups."""

    tag_filter: Optional[Filter] = None
    # A filter expression for the resource group results.
    filter: Optional[str] = None


@dataclass
class ListResourceGroupResourcesOptions:
    """Optional parameters for listing resources."""

    # A filter expression for the resource list.
    filter: Optional[str] = None


def _filter_params(expression: Optional[str]) -> Optional[dict[str, str]]:
    return {"$filter": expression} if expression else None


def _to_extended(data: dict[str, Any]) -> ResourceExtended:
    return ResourceExtended(
        id=data["id"],
        name=data["name"],
        type=data["type"],
        location=data.get("location", ""),
        kind=to_value_with_default(data.get("kind"), ""),
    )


def _to_group(data: dict[str, Any]) -> ResourceGroup:
    return ResourceGroup(id=data["id"], name=data["name"], location=data["location"])


class ResourceService:
    """Operations on resource groups and the resources in them."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def get_resource(
        self, subscription_id: str, resource_id: str, api_version: str = ""
    ) -> ResourceExtended:
        """The resource with ``resource_id``.

        Without an ``api_version`` the provider's default version is used.
        """
        if not api_version:
            try:
                parsed = parse_resource_id(resource_id)
            except ValueError as exc:
                raise ValueError(f"parsing resource id: {exc}") from exc
            api_version = self._get_api_version(parsed, subscription_id)

        return _to_extended(self._client.get(resource_id, api_version))

    def list_resource_group_resources(
        self,
        subscription_id: str,
        resource_group_name: str,
        options: Optional[ListResourceGroupResourcesOptions] = None,
    ) -> list[ResourceExtended]:
        """The resources in a resource group."""
        path = f"{resource_group_rid(subscription_id, resource_group_name)}/resources"
        params = _filter_params(options.filter if options is not None else None)
        return [_to_extended(item) for item in self._client.list(path, _API_VERSION, params)]

    def get_resource_group(self, subscription_id: str, resource_group_name: str) -> ResourceGroup:
        """The resource group named ``resource_group_name``."""
        path = resource_group_rid(subscription_id, resource_group_name)
        return _to_group(self._client.get(path, _API_VERSION))

    def list_resource_group(
        self,
        subscription_id: str,
        options: Optional[ListResourceGroupOptions] = None,
    ) -> list[Resource]:
        """The resource groups of a subscription; a tag filter wins over a filter."""
        expression: Optional[str] = None
        if options is not None:
            if options.tag_filter is not None:
                expression = (
                    f"tagName eq '{options.tag_filter.key}' "
                    f"and tagValue eq '{options.tag_filter.value}'"
                )
            elif options.filter is not None:
                expression = options.filter

        path = f"{subscription_rid(subscription_id)}/resourceGroups"
        return [
            Resource(
                id=group["id"],
                name=group["name"],
                type=group["type"],
                location=group["location"],
            )
            for group in self._client.list(path, _API_VERSION, _filter_params(expression))
        ]

    def list_subscription_resources(
        self,
        subscription_id: str,
        options: Optional[ListResourceGroupResourcesOptions] = None,
    ) -> list[ResourceExtended]:
        """All the resources of a subscription."""
        path = f"{subscription_rid(subscription_id)}/resources"
        params = _filter_params(options.filter if options is not None else None)
        return [_to_extended(item) for item in self._client.list(path, _API_VERSION, params)]

    def create_or_update_resource_group(
        self,
        subscription_id: str,
        resource_group_name: str,
        location: str,
        tags: Optional[dict[str, Optional[str]]] = None,
    ) -> ResourceGroup:
        """Create the resource group, or update it when it exists."""
        body: dict[str, Any] = {"location": location}
        if tags is not None:
            body["tags"] = tags
        path = resource_group_rid(subscription_id, resource_group_name)
        return _to_group(self._client.put(path, _API_VERSION, body))

    def delete_resource_group(self, subscription_id: str, resource_group_name: str) -> None:
        """Delete the resource group and wait until it is gone."""
        self._client.delete(resource_group_rid(subscription_id, resource_group_name), _API_VERSION)

    def _get_api_version(self, resource_id: ArmResourceId, subscription_id: str) -> str:
        subscription = resource_id.subscription_id or subscription_id
        path = f"{subscription_rid(subscription)}/providers/{resource_id.provider_namespace}"
        provider = self._client.get(path, _API_VERSION)
        for resource_type in provider.get("resourceTypes", []):
            if resource_type.get("resourceType") == resource_id.resource_type:
                version = resource_type.get("defaultApiVersion")
                if version:
                    return version
        raise LookupError(
            f"api version not found for resource type {resource_id.resource_type}"
        )