[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "multiio"
version = "0.1.0"
description = "Echo and HTTP servers built on select, poll, epoll and an event reactor"
requires-python = ">=3.10"
dependencies = []
keywords = ["select", "poll", "epoll", "reactor", "echo", "server", "networking"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
multiio-echo = "multiio.echo:main"
multiio-reactor = "multiio.reactor:main"
multiio-webserver = "multiio.webserver:main"

[tool.hatch.build.targets.wheel]
packages = ["multiio"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
