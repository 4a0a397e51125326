[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "freedboards"
version = "0.1.0"
description = "Go and Invasion game logic on arbitrary board topologies: spheres, tori, Mobius strips, honeycombs and more"
requires-python = ">=3.10"
dependencies = []
keywords = ["go", "board game", "topology", "invasion", "flood fill", "mesh"]
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
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
freedboards = "freedboards.shapes:main"

[tool.hatch.build.targets.wheel]
packages = ["freedboards"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
