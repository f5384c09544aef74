[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lunartrack"
version = "1.0.0"
description = "HTTP API that tracks lunar rockets from ordered, deduplicated state-change messages"
requires-python = ">=3.11"
dependencies = []
keywords = ["rockets", "tracking", "http", "api", "json", "messages"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lunartrack = "lunartrack.server:main"

[tool.hatch.build.targets.wheel]
packages = ["lunartrack"]

[tool.pytest.ini_options]
addopts = "-ra"
