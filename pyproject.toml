[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "httpengine"
version = "1.0.0"
description = "A small, embeddable asyncio HTTP/1.x server engine with routing, middleware, range requests and static file serving"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "asyncio", "middleware", "static-files", "range-requests", "authentication"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
httpengine-fileserver = "httpengine.fileserver:main"
httpengine-authclient = "httpengine.authclient:main"

[tool.hatch.build.targets.wheel]
packages = ["httpengine"]

[tool.hatch.build.targets.sdist]
include = ["httpengine", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
