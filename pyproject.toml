[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sharedlock"
version = "0.1.0"
description = "Reader-writer (shared) mutexes and a throughput benchmark that compares them"
requires-python = ">=3.10"
dependencies = []
keywords = ["rwlock", "shared mutex", "reader-writer lock", "benchmark", "concurrency", "threading"]
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
    "Topic :: System :: Benchmark",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sharedlock-bench = "sharedlock.bench:main"

[tool.hatch.build.targets.wheel]
packages = ["sharedlock"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
