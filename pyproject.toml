[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edassist"
version = "0.1.0"
description = "Bridge to a developer assistant that runs as JavaScript in an embedded browser: JSON message types, JavaScript call formatting and result routing to futures."
requires-python = ">=3.10"
dependencies = []
keywords = ["assistant", "javascript", "json", "bridge", "webview", "futures"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["edassist"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
