[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "compactify"
version = "0.1.0"
description = "Batch image compression and manipulation from the command line"
requires-python = ">=3.10"
keywords = ["image", "compression", "resize", "convert", "crop", "thumbnail", "cli", "batch"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]
dependencies = [
    "pillow",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
compactify = "compactify.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["compactify"]

[tool.pytest.ini_options]
addopts = "-ra"
