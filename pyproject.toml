[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "knockd"
version = "0.1.0"
description = "Port-knocking daemon that logs a service activation when a client knocks a configured TCP port sequence in time"
requires-python = ">=3.10"
dependencies = []
keywords = ["port-knocking", "daemon", "security", "tcp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
knockd = "knockd.daemon:main"

[tool.hatch.build.targets.wheel]
packages = ["knockd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
