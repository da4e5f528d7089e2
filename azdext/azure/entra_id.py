"""Role assignments for principals."""

from __future__ import annotations

import uuid
from enum import Enum
from http import HTTPStatus
from typing import Any, Union

from azdext.azure.arm import ResponseError
from azdext.azure.resource_ids import subscription_rid

_API_VERSION = "2022-04-01"


class RoleName(str, Enum):
    """Built in role names."""

    STORAGE_BLOB_DATA_CONTRIBUTOR = "Storage Blob Data Contributor"
    COGNITIVE_SERVICES_OPENAI_CONTRIBUTOR = "Cognitive Services OpenAI Contributor"
    SEARCH_INDEX_DATA_CONTRIBUTOR = "Search Index Data Contributor"
    SEARCH_INDEX_DATA_READER = "Search Index Data Reader"
    SEARCH_SERVICE_CONTRIBUTOR = "Search Service Contributor"

    def __str__(self) -> str:
        return self.value


def _role_text(role: Union[RoleName, str]) -> str:
    return role.value if isinstance(role, RoleName) else str(role)


class EntraIdService:
    """Grants roles to principals; talks to the resource manager through ``client``.

    ``client`` has the ``list`` and ``put`` methods described in
    :mod:`azdext.azure.resources`.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def ensure_role_assignment(
        self,
        subscription_id: str,
        scope: str,
        principal_id: str,
        *args: Union[RoleName, str],
    ) -> None:
        """Assign each role in ``args`` to the principal at ``scope``.

        An assignment that already exists ends the call without error.
        """
        base = scope.rstrip("/")
        for role in args:
            role_definition_id = self._get_role_definition_id(subscription_id, role)
            path = f"{base}/providers/Microsoft.Authorization/roleAssignments/{uuid.uuid4()}"
            body = {
                "properties": {
                    "principalId": principal_id,
                    "roleDefinitionId": role_definition_id,
                }
            }
            try:
                self._client.put(path, _API_VERSION, body)
            except ResponseError as exc:
                if exc.status_code == HTTPStatus.CONFLICT:
                    return
                raise

    def _get_role_definition_id(self, subscription_id: str, role: Union[RoleName, str]) -> str:
        name = _role_text(role)
        path = f"{subscription_rid(subscription_id)}/providers/Microsoft.Authorization/roleDefinitions"
        params = {"$filter": f"roleName eq '{name}'"}
        for definition in self._client.list(path, _API_VERSION, params):
            role_name = (definition.get("properties") or {}).get("roleName", "")
            if role_name.casefold() == name.casefold():
                return definition["id"]
        raise LookupError(f"role definition not found for role name: {name}")