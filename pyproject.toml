[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "azdext"
version = "0.1.0"
description = "Building blocks for Azure developer tooling: cloud settings, resource ids, deployments, errors and a scoped IoC container"
requires-python = ">=3.10"
dependencies = []
keywords = ["azure", "deployments", "arm", "resource-manager", "ioc", "dependency-injection"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["azdext"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
