[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gazekeys"
version = "0.1.0"
description = "Eye tracking that turns double blinks and gaze direction into arrow-key commands"
requires-python = ">=3.10"
keywords = ["eye tracking", "blink detection", "gaze", "pupil", "hands-free"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "scipy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gazekeys = "gazekeys.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gazekeys"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
