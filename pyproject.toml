[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubemulti"
version = "0.1.0"
description = "List Kubernetes resources across all KubeStellar managed clusters as one table"
requires-python = ">=3.10"
keywords = ["kubernetes", "kubectl", "multi-cluster", "kubestellar", "cli"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: System :: Clustering",
]
dependencies = [
    "requests",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
kubectl-multi = "kubemulti.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kubemulti"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
