"""Azure clouds, resource models, resource ids, header policies, deployment errors and management services."""