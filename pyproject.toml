[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "devglue"
version = "1.0.0"
description = "Small building blocks for device tooling: SHA-2 hashing, TLV buffers, network interface queries, socket helpers, thread helpers and coloured terminal output"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["sha512", "sha384", "tlv", "sockets", "ipv6", "threads", "terminal colors", "utilities"]
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
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["devglue"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
