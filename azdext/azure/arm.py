"""Resource manager errors and resource id parsing."""

from __future__ import annotations

from dataclasses import dataclass

_DEFAULT_NAMESPACE = "Microsoft.Resources"


class ResponseError(Exception):
    """An unsuccessful response from the resource manager."""

    def __init__(
        self,
        status_code: int,
        error_code: str = "",
        message: str = "",
        body: str = "",
    ) -> None:
        super().__init__(status_code, error_code, message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.body = body

    def __str__(self) -> str:
        text = f"unexpected status code {self.status_code}"
        if self.error_code:
            text += f" ({self.error_code})"
        if self.message:
            text += f": {self.message}"
        return text


@dataclass(frozen=True)
class ArmResourceId:
    """The parts of a resource id."""

    subscription_id: str
    resource_group_name: str
    provider_namespace: str
    # The resource type below the namespace, e.g. "sites" or "accounts/deployments".
    resource_type: str
    name: str


def _invalid(resource_id: str, reason: str) -> ValueError:
    return ValueError(f"invalid resource ID '{resource_id}': {reason}")


def parse_resource_id(resource_id: str) -> ArmResourceId:
    """Split a resource id into its parts; raises ValueError when it is malformed."""
    if not resource_id:
        raise ValueError("invalid resource ID: id cannot be empty")
    if not resource_id.startswith("/"):
        raise _invalid(resource_id, "must start with '/'")

    parts = resource_id.strip("/").split("/")
    if any(not part for part in parts):
        raise _invalid(resource_id, "segments cannot be empty")

    subscription_id = ""
    resource_group_name = ""
    namespace = _DEFAULT_NAMESPACE
    types: list[str] = []
    name = ""
    index = 0

    first = parts[0].lower()
    if first == "subscriptions":
        if len(parts) < 2:
            raise _invalid(resource_id, "missing subscription id")
        subscription_id = parts[1]
        types, name = ["subscriptions"], subscription_id
        index = 2
        if index < len(parts) and parts[index].lower() == "resourcegroups":
            if index + 1 >= len(parts):
                raise _invalid(resource_id, "missing resource group name")
            resource_group_name = parts[index + 1]
            types, name = ["resourceGroups"], resource_group_name
            index += 2
    elif first != "providers":
        raise _invalid(resource_id, "must begin with 'subscriptions' or 'providers'")

    while index < len(parts):
        segment = parts[index]
        if segment.lower() == "providers":
            if index + 1 >= len(parts):
                raise _invalid(resource_id, "missing provider namespace")
            namespace = parts[index + 1]
            types = []
            index += 2
            continue
        if index + 1 >= len(parts):
            raise _invalid(resource_id, f"missing name for resource type '{segment}'")
        types.append(segment)
        name = parts[index + 1]
        index += 2

    if not types:
        raise _invalid(resource_id, "missing resource type")

    return ArmResourceId(
        subscription_id=subscription_id,
        resource_group_name=resource_group_name,
        provider_namespace=namespace,
        resource_type="/".join(types),
        name=name,
    )