[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xsmcomp"
version = "0.1.0"
description = "Code generators for the SPL and ExpL teaching languages targeting XSM assembly"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "code generation", "assembly", "xsm", "spl", "expl", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xsmcomp"]

[tool.pytest.ini_options]
addopts = "-ra"
