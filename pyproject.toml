[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tonutils"
version = "0.1.0"
description = "TON blockchain client primitives: user-friendly addresses, TL serialization and an ADNL lite-server connection pool"
requires-python = ">=3.10"
keywords = ["ton", "blockchain", "adnl", "liteserver", "tl", "address", "vanity"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tonutils-vanity = "tonutils.vanity:main"

[tool.hatch.build.targets.wheel]
packages = ["tonutils"]

[tool.pytest.ini_options]
addopts = "-ra"
