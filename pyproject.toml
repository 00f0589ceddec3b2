[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tcpstack"
version = "0.1.0"
description = "A small user-space TCP/IP stack: byte streams, reassembly, TCP sender and receiver, ARP-capable network interfaces and a longest-prefix-match router"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "ip", "networking", "arp", "router", "reassembler", "byte-stream"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
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
webget = "tcpstack.webget:main"

[tool.hatch.build.targets.wheel]
packages = ["tcpstack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
