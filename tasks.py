from pathlib import Path

from invoke import Context, UnexpectedExit, task

TOP_DIR = Path(__file__).parent
SRC_DIR = TOP_DIR / "src"
OUT_DIR = TOP_DIR / "build"
TEST_DIR = TOP_DIR / "tests" / "unit"


@task
def test(c: Context) -> None:
    """Run tests."""
    with c.cd(str(TOP_DIR)):
        c.run("pytest", pty=True)


@task
def cov(c: Context) -> None:
    """Run tests and report coverage."""
    with c.cd(str(TOP_DIR)):
        c.run(f"pytest --cov={SRC_DIR / 'asmexpr'}", pty=True)
        c.run(f"coverage html -d {OUT_DIR}/coverage --skip-empty", pty=True)


@task
def types(c: Context, report: bool = False) -> None:
    """Type-check sources with mypy."""
    cmd = ["mypy"]
    if report:
        cmd.append(f"--html-report {OUT_DIR}/mypy-report.html")
    cmd.append(str(SRC_DIR / "asmexpr"))
    cmd.append(str(TEST_DIR))
    print("Type-checking...")
    with c.cd(str(TOP_DIR)):
        try:
            c.run(" ".join(cmd), pty=True)
        except UnexpectedExit as ex:
            if ex.result.exited < 0:
                print(ex)


@task
def lint(c: Context, src: str | None = None) -> None:
    """Check sources with PyLint."""
    print("Linting...")
    sources = (
        (SRC_DIR / "asmexpr").glob("**/*.py") if src is None else Path.cwd().glob(src)
    )
    with c.cd(str(TOP_DIR)):
        c.run("pylint %s" % " ".join(str(path) for path in sources), pty=True)
