[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "adminkit"
version = "2.0.6"
description = "Building blocks for an admin back end: request DTOs, middleware, data permissions, operation logs and database migrations"
requires-python = ">=3.10"
keywords = ["admin", "middleware", "rbac", "migrations", "pagination", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "pyyaml",
    "bcrypt",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
adminkit = "adminkit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["adminkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
