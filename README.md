# azdext

Reusable pieces for tools that work with Azure Resource Manager: cloud
definitions, resource id helpers, readable deployment errors, services for
resources, subscriptions, role assignments and deployments, storage helpers,
and a dependency-injection container with scopes.

The package has no dependencies outside the standard library.

## Install

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `azdext.errors` – `DetailedError(description, err)`, whose text is the
  description followed by a `Details:` section; `ErrorWithSuggestion(err, suggestion)`
  and `ErrorWithTraceId(err, trace_id)`, which show the wrapped error's text and
  carry the suggestion or trace id as attributes.
- `azdext.ordered_map` – `load_with_order(data, factory=None)` decodes a JSON
  object into a `WithOrder` mapping that keeps key order (`ordered_keys()`,
  `ordered_values()`, `get(key)`), optionally converting each non-null value
  with `factory`.
- `azdext.common` – `is_string_none_or_empty`, `value_equals`,
  `to_value_with_default` (treats `None` and `""` as missing), and the file mode
  constants `PERMISSION_DIRECTORY`, `PERMISSION_FILE`, `PERMISSION_FILE_OWNER_ONLY`
  and friends.
- `azdext.ioc` – `NestedContainer`, with singleton, transient and scoped
  lifetimes, named registrations, `register_instance`, `resolve`, `resolve_named`,
  `invoke`, `fill`, `new_scope` and `new_scope_registrations_only`;
  `new_registrations_only(source)`; `ResolveError` when nothing is registered.
- `azdext.azure.cloud` – `azure_public()`, `azure_government()`, `azure_china()`,
  `new_cloud(config)` and `parse_cloud_config(partial_config)`.
- `azdext.azure.models` – `ResourceType` and `DeploymentProvisioningState` enums,
  `Subscription`, `Location`, `ResourceGroup`, `Resource`, `ResourceExtended`
  (each with `to_dict()`), `ResourceDeployment`, and `DeploymentNotFoundError`.
- `azdext.azure.resource_ids` – builders such as `subscription_rid`,
  `resource_group_rid`, `website_rid`, `container_app_rid`; plus
  `subscription_from_rid` and `get_resource_group_name`.
- `azdext.azure.arm` – `ResponseError(status_code, ...)` and
  `parse_resource_id`, returning an `ArmResourceId`.
- `azdext.azure.policies` – `new_ms_correlation_policy()`,
  `new_ms_graph_correlation_policy()` and `new_user_agent_policy(user_agent)`.
  Each policy's `apply` edits a mutable mapping of request headers.
- `azdext.azure.deployment_error` – `DeploymentError(json_text)` turns an ARM
  error body into one line per error, skipping generic "deployment failed"
  wrappers; `get_errors_from_map` and `generate_error_output` expose the steps.
- `azdext.azure.resources` – `ResourceService`, with `Filter`,
  `ListResourceGroupOptions` and `ListResourceGroupResourcesOptions`.
- `azdext.azure.entra_id` – `EntraIdService.ensure_role_assignment` and the
  `RoleName` enum.
- `azdext.azure.subscriptions` – `SubscriptionsService`.
- `azdext.azure.standard_deployments` – `StandardDeployments` and
  `convert_standard_provisioning_state`.
- `azdext.azure.stack_deployments` – `StackDeployments`, which falls back to
  standard deployments when no stack is found; `parse_deployment_stack_options`,
  which reads the `DeploymentStacks` section of an options mapping and the
  `DEPLOYMENT_STACKS_BYPASS_STACK_OUT_OF_SYNC_ERROR` environment variable.
- `azdext.azure.storage.blob_client` – `BlobClient` (`items`, `download`,
  `upload`, `delete`; the container is created on first use), `AccountConfig`,
  `Blob` and `blob_endpoint(account_config, cloud)`.
- `azdext.azure.storage.file_share` – `FileShareService.upload_path`, which
  uploads a directory tree to a file share, creating directories as needed.

## Examples

Building resource ids:

```python
from azdext.azure.resource_ids import resource_group_rid, get_resource_group_name

rid = resource_group_rid("00000000-0000-0000-0000-000000000000", "rg-demo")
# '/subscriptions/00000000-0000-0000-0000-000000000000/resourceGroups/rg-demo'
get_resource_group_name(rid + "/providers/Microsoft.Web/sites/app")
# 'rg-demo'
```

Picking a cloud from configuration:

```python
from azdext.azure.cloud import new_cloud, parse_cloud_config

cloud = new_cloud(parse_cloud_config({"name": "AzureChinaCloud"}))
cloud.portal_url_base  # 'https://portal.azure.cn'
```

An unknown cloud name raises `ValueError`; an empty name means the public cloud.

Turning an ARM error response into readable lines:

```python
from azdext.azure.deployment_error import DeploymentError

err = DeploymentError('{"error": {"code": "BadRequest", "message": "Invalid sku"}}')
print(err)  # BadRequest: Invalid sku
```

The lines are coloured red only when standard output is a terminal and
`NO_COLOR` is not set.

Adding a user agent to request headers:

```python
from azdext.azure.policies import new_user_agent_policy

headers = {"User-Agent": "base/1.0"}
new_user_agent_policy("mytool/2.0").apply(headers)
headers["User-Agent"]  # 'base/1.0,mytool/2.0'
```

Using the container with scopes:

```python
from azdext.ioc import NestedContainer

class Clock:
    pass

root = NestedContainer()

def make_clock() -> Clock:
    return Clock()

root.register_scoped(make_clock)
scope = root.new_scope()
assert scope.resolve(Clock) is scope.resolve(Clock)
assert scope.resolve(Clock) is not root.new_scope().resolve(Clock)
```

Resolvers are keyed by their return annotation and their parameters are
resolved from their annotations, so these must be the actual types; in a
module using `from __future__ import annotations` the annotations are strings
and will not match.

## Talking to Azure

The services do not make HTTP requests or handle authentication themselves.
Each one is given a client object that you supply:

- `ResourceService`, `EntraIdService`, `SubscriptionsService`,
  `StandardDeployments` and `StackDeployments` take a resource manager client
  with `get(path, api_version, params=None)`, `list(path, api_version, params=None)`
  (yielding the items of every page), `put(path, api_version, body)` and
  `delete(path, api_version)`, raising `azdext.azure.arm.ResponseError` on a
  failed request.
- `BlobClient(config, client)` takes a blob service client with
  `list_containers`, `create_container`, `list_blobs`, `download`, `upload`
  and `delete_blob`.
- `FileShareService(client_factory)` takes a function that returns, for a share
  URL, a client with `create_directory`, `create_file` and `upload_file`.

`StackDeployments` waits while a stack has no deployment id yet; its
`retry_interval`, `max_retry_duration`, `sleep` and `clock` keyword arguments
control that wait.

## What it does not do

- There is no command-line program.
- There is no HTTP transport, credential handling or token acquisition; the
  caller provides the clients described above.
- Correlation policies do not read a trace id from any tracing library; the
  caller passes the trace id to `apply`.