[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nodeflow"
version = "0.1.0"
description = "Node-based dataflow graphs: data models, typed ports, connections, styles and XML flow documents"
requires-python = ">=3.10"
keywords = ["dataflow", "node graph", "graph", "visual programming", "flow"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
nodeflow-flow = "nodeflow.flow:main"

[tool.hatch.build.targets.wheel]
packages = ["nodeflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
