[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "titanvanguard"
version = "0.1.0"
description = "Grid-based multiplayer arena shooter: game model, Flask game server with matchmaking, and HTTP client"
requires-python = ">=3.10"
keywords = ["game", "arcade", "multiplayer", "shooter", "matchmaking", "flask"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Arcade",
]
dependencies = [
    "flask>=2.2",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "responses>=0.23",
]

[project.scripts]
titanvanguard-server = "titanvanguard.server:main"

[tool.setuptools.packages.find]
include = ["titanvanguard*"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
