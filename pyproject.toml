[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "streamsync"
version = "0.1.0"
description = "Set a live stream's title and category on Twitch from the command line, with a loopback OAuth sign-in using PKCE."
requires-python = ">=3.10"
keywords = ["twitch", "streaming", "oauth", "pkce", "stream title", "helix"]
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
    "Topic :: Multimedia :: Video",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
streamsync = "streamsync.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["streamsync"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
