[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "contbackup"
version = "0.1.0"
description = "Resumable copy sessions that stream a blob from one storage to another"
requires-python = ">=3.10"
dependencies = []
keywords = ["backup", "blob", "copy", "resumable", "storage", "session"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Backup",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools]
packages = ["contbackup"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
