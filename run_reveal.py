import os
import sys
import subprocess
import venv
from pathlib import Path

# Project root (where run_reveal.py lives)
ROOT_DIR = Path(__file__).resolve().parent
VENV_DIR = ROOT_DIR / ".venv"

# Runtime packages of the particle reveal app
BASE_PACKAGES = [
    "PyQt6",
    "numpy",
]

# Only needed to run the test-suite
TEST_PACKAGES = [
    "pytest",
]


def ensure_venv() -> Path:
    """Create .venv if needed and return the venv python executable."""
    if not VENV_DIR.exists():
        print("[reveal] Creating local virtual environment (.venv)...")
        venv.create(VENV_DIR, with_pip=True)

    if os.name == "nt":
        python_path = VENV_DIR / "Scripts" / "python.exe"
    else:
        python_path = VENV_DIR / "bin" / "python"

    if not python_path.exists():
        raise RuntimeError(f"Python in venv not found: {python_path}")

    return python_path


def run_pip(venv_python: Path, args: list[str]) -> None:
    """Run pip inside the venv, raise if it fails."""
    cmd = [str(venv_python), "-m", "pip"] + args
    print("[reveal] Running:", " ".join(cmd))
    subprocess.check_call(cmd)


def install_requirements(venv_python: Path, with_tests: bool = False) -> None:
    print("[reveal] Updating dependencies in venv...")
    run_pip(venv_python, ["install", "--upgrade", "pip"])
    run_pip(venv_python, ["install", "--upgrade", *BASE_PACKAGES])

    if with_tests:
        print("[reveal] Installing test packages (pytest)…")
        try:
            run_pip(venv_python, ["install", "--upgrade", *TEST_PACKAGES])
        except subprocess.CalledProcessError as e:
            print("[reveal] WARNING: Could not install test packages:", e)
            print("[reveal] The test-suite will not be runnable.")


def main():
    args = sys.argv[1:]
    run_tests = bool(args) and args[0] == "test"

    venv_python = ensure_venv()
    install_requirements(venv_python, with_tests=run_tests)

    # Prepare environment for subprocess (so it can import reveal_app properly)
    env = os.environ.copy()
    old_pythonpath = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = str(ROOT_DIR) + (os.pathsep + old_pythonpath if old_pythonpath else "")

    if run_tests:
        cmd = [str(venv_python), "-m", "pytest", str(ROOT_DIR / "tests"), *args[1:]]
    else:
        # GUI mode (default); remaining arguments go to reveal_app.gui
        extra = args[1:] if args and args[0] == "gui" else args
        cmd = [str(venv_python), "-m", "reveal_app.gui", *extra]

    sys.exit(subprocess.call(cmd, env=env))


if __name__ == "__main__":
    main()
