[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "specialresource"
version = "0.1.0"
description = "Helpers for rolling out special-resource driver stacks on Kubernetes clusters: manifest splitting, kernel affinity, proxy setup, readiness polling and driver-toolkit version info."
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "openshift", "operator", "drivers", "kernel", "manifests"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["specialresource"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
