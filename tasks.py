from invoke import task
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.absolute()


def project_relative(path):
    """Convert a relative path to an absolute path relative to the project root."""
    return str(PROJECT_ROOT / path)


@task
def update(c):
    """Update all dependencies to their latest versions using poetry."""
    c.run("poetry update")


@task
def up(c):
    """Alias for update - update all dependencies to their latest versions."""
    update(c)


@task
def shell(c):
    """Start Django shell."""
    manage_py = project_relative("manage.py")
    c.run(f"python {manage_py} shell")


@task
def test(c, path=None):
    """Run the test suite with the test settings. Optionally specify a test path."""
    manage_py = project_relative("manage.py")
    settings = "--settings=pitchside.test_settings"
    if path:
        c.run(f"python {manage_py} test {settings} {path}")
    else:
        c.run(f"python {manage_py} test {settings} pitchside")


@task
def simulate(c, players=8, rounds=5, seed=None, format=None):
    """Simulate a random tournament and print its standings."""
    manage_py = project_relative("manage.py")
    command = (
        f"python {manage_py} simulate_standings "
        f"--players {players} --rounds {rounds}"
    )
    if seed is not None:
        command += f" --seed {seed}"
    if format:
        command += f" --format {format}"
    c.run(command)
