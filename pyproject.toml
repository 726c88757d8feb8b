[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rabbitwire"
version = "0.1.0"
description = "AMQP 0-9-1 wire-level building blocks: field tables, URLs, deadlines, TCP sockets and child-process pipelines"
requires-python = ">=3.10"
dependencies = []
keywords = ["amqp", "rabbitmq", "field-table", "codec", "messaging"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rabbitwire"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
