[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kapistore"
version = "0.1.0"
description = "Storage layer for a self-hosted file sharing service: chunked uploads, expiry, deduplicated content and hotlinks"
requires-python = ">=3.10"
dependencies = []
keywords = ["file-sharing", "upload", "chunking", "storage", "hotlink"]
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
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kapistore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
