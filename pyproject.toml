[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "webservd"
version = "0.1.0"
description = "A small selector-driven TCP server configured by an nginx-like configuration file"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "webserver", "configuration", "nginx", "selectors"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
webservd = "webservd.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["webservd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
