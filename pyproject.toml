[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ecplatform"
version = "0.1.0"
description = "Embedded controller platform services: resumable CRC, NVRAM sections, power button handling and HID over I2C interrupt passthrough"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "embedded",
    "embedded-controller",
    "crc",
    "nvram",
    "debounce",
    "power-button",
    "hid",
    "i2c",
    "espi",
    "asyncio",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
ecplatform-crc = "ecplatform.crc:main"
ecplatform-nvram = "ecplatform.nvram:main"
ecplatform-power-button = "ecplatform.power_button:main"
ecplatform-transport = "ecplatform.transport:main"
ecplatform-espi-mock = "ecplatform.espi_mock:main"

[tool.hatch.build.targets.wheel]
packages = ["ecplatform"]

[tool.hatch.build.targets.sdist]
include = [
    "ecplatform",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
