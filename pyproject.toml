[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mailfields"
version = "0.1.0"
description = "Parsers for e-mail header fields, plus Mbox and Maildir mailbox readers"
requires-python = ">=3.10"
dependencies = []
keywords = ["email", "rfc5322", "mime", "headers", "mbox", "maildir"]
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
    "Topic :: Communications :: Email",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mailfields"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
