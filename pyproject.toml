[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "akiradecrypt"
version = "0.1.0"
description = "Recover files encrypted by the Akira Linux variant from the nanosecond timestamps used to seed its keys"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "akira",
    "ransomware",
    "recovery",
    "decryption",
    "chacha8",
    "kcipher2",
    "yarrow",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Information Technology",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: System :: Recovery Tools",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
akira-decrypt = "akiradecrypt.decrypt:main"
akira-read-log = "akiradecrypt.readlog:main"
akira-patch = "akiradecrypt.patching:main"
akira-readhex = "akiradecrypt.readhex:main"

[tool.hatch.build.targets.wheel]
packages = ["akiradecrypt"]

[tool.hatch.build.targets.sdist]
include = [
    "akiradecrypt",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
