[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "llakit"
version = "0.3.10"
description = "Toolkit for directory-listing plugins: entry decoration, TOML configuration, terminal output components, and plugins for categories, code complexity, directory metadata and duplicate files"
requires-python = ">=3.11"
keywords = ["ls", "file-system", "plugins", "terminal", "file-management"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Utilities",
]
dependencies = [
    "tomli-w>=1.0",
    "wcwidth>=0.2.6",
    "pygments>=2.15",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[tool.hatch.build.targets.wheel]
packages = ["llakit"]

[tool.hatch.build.targets.sdist]
include = ["llakit", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
