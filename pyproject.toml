[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xqengine"
version = "0.1.0"
description = "Xiangqi (Chinese chess) position model, move generation and a small UCCI-style TCP command server"
requires-python = ">=3.10"
dependencies = []
keywords = ["xiangqi", "chinese chess", "ucci", "move generation", "zobrist", "fen"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xqengine-server = "xqengine.server:main"

[tool.hatch.build.targets.wheel]
packages = ["xqengine"]

[tool.pytest.ini_options]
addopts = "-ra"
