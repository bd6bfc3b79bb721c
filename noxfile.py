import nox

PYTHONS = ["3.11", "3.12", "3.13"]


@nox.session(python=PYTHONS)
def tests(session):
    session.install(".[dev]")
    session.run("pytest", "tests", external=True)


@nox.session
def certs(session):
    """Regenerate certificates/key.pem, cert.pem and cert.sha256."""
    session.install(".")
    session.run("python", "certificates/generate.py", *session.posargs)
