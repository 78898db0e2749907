import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

nox.options.sessions = ["tests"]


def _install(session: nox.Session) -> None:
    """Install the storefront with its test extra."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the whole storefront suite."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_domain(session: nox.Session) -> None:
    """Aggregates, value objects and money rules; no gateways or HTTP."""
    _install(session)
    session.run("pytest", "-m", "domain", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_payments(session: nox.Session) -> None:
    """Billing, webhook, sweeper and stock paths, including the payment scenarios."""
    _install(session)
    session.run(
        "pytest",
        "tests/storefront/application/",
        "tests/storefront/bdd/",
        "-k",
        "pix or card or sweep or stock or payment or gateway",
        *session.posargs,
    )


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_api(session: nox.Session) -> None:
    """FastAPI endpoints through the test client."""
    _install(session)
    session.run("pytest", "-m", "integration", *session.posargs)
