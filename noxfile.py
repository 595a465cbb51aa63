"""Nox automation configuration for mcuxeq.

Provides automated testing, linting, formatting, and build tasks.
"""

import nox

# Default sessions to run
nox.options.sessions = ["lint", "tests"]
nox.options.reuse_existing_virtualenvs = True


@nox.session(python=["3.8", "3.9", "3.10", "3.11", "3.12"])
def tests(session):
    """Run the test suite."""
    session.install("-e", ".[dev]")
    session.run("pytest", *session.posargs)


@nox.session(python="3.10")
def coverage(session):
    """Run tests with coverage reporting."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=mcuxeq",
        "--cov-report=term-missing",
        "--cov-report=html",
        "--cov-report=xml",
        *session.posargs
    )


@nox.session(python="3.10")
def lint(session):
    """Run linters (flake8 and mypy)."""
    session.install("-e", ".[dev]")
    session.run("flake8", "--max-line-length=110", "mcuxeq", "tests")
    session.run("mypy", "mcuxeq")


@nox.session(python="3.10")
def format(session):
    """Format code with black."""
    session.install("black")
    session.run("black", "mcuxeq", "tests", "main.py", "noxfile.py")


@nox.session(python="3.10")
def format_check(session):
    """Check code formatting with black."""
    session.install("black")
    session.run("black", "--check", "mcuxeq", "tests", "main.py", "noxfile.py")


@nox.session(python="3.10")
def build(session):
    """Build distribution packages."""
    session.install("build", "twine")
    session.run("python", "-m", "build")
    session.run("twine", "check", "dist/*")


@nox.session(python="3.10")
def tests_unit(session):
    """Run unit tests only."""
    session.install("-e", ".[dev]")
    session.run("pytest", "tests/unit", "-v", *session.posargs)


@nox.session(python="3.10")
def tests_integration(session):
    """Run pseudo-terminal integration tests only."""
    session.install("-e", ".[dev]")
    session.run("pytest", "tests/integration", "-v", *session.posargs)


@nox.session(python="3.10")
def tests_session(session):
    """Run command session engine tests only."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "tests/unit/test_line_assembler.py",
        "tests/unit/test_byte_source.py",
        "tests/unit/test_command_session.py",
        "-v",
        *session.posargs
    )


@nox.session(python="3.10")
def ci(session):
    """Run full CI pipeline (tests + coverage + lint)."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=mcuxeq",
        "--cov-report=term-missing",
        "--cov-report=xml",
        "--cov-fail-under=80",
        "-v"
    )
    session.run("flake8", "--max-line-length=110", "mcuxeq", "tests")
    session.run("mypy", "mcuxeq", "--ignore-missing-imports")
