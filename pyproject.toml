[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wiifc"
version = "0.1.0"
description = "Protocol helpers for a Nintendo Wi-Fi Connection replacement server: GameSpy messages, auth tokens, match commands and Mario Kart Wii ghost validation"
requires-python = ">=3.10"
keywords = ["gamespy", "wii", "nintendo-wfc", "mario-kart-wii", "matchmaking", "protocol"]
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
    "Topic :: Games/Entertainment",
    "Topic :: Internet",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["wiifc"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
