"""Start the demo apps in a tmux session, or run one of the demo apps.

With no arguments the launcher looks for ``launch_tmux.sh`` in the project
root, runs it with bash and then attaches to the tmux session it created.
With ``app1``, ``app2`` or ``app3`` it runs that counting demo instead.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import time
from collections.abc import Callable
from pathlib import Path

#: Name of the script that sets up the tmux panes.
SCRIPT_NAME = "launch_tmux.sh"

#: tmux session the script creates.
TMUX_SESSION_NAME = "multi_rust_apps_panes"

#: Demo apps: command name -> (display name, seconds to run).
APPS = {
    "app1": ("App 1", 20),
    "app2": ("App 2", 15),
    "app3": ("App 3", 10),
}


class LaunchError(Exception):
    """Raised when the launch script cannot be found or run."""


def _parent(path: Path) -> Path:
    parent = path.parent
    if parent == path:
        raise LaunchError("Cannot get project root directory from executable path.")
    return parent


def find_launch_script(executable: str | Path, script_name: str = SCRIPT_NAME) -> Path:
    """Locate ``script_name`` in the project root, three levels above ``executable``."""
    executable = Path(executable)
    if executable.parent == executable:
        raise LaunchError("Cannot get parent directory of executable.")
    target_dir = executable.parent
    project_root = _parent(_parent(target_dir))
    script_path = project_root / script_name
    if not script_path.exists():
        raise LaunchError(
            f"Launch script not found at expected location: {script_path}\n"
            f"Make sure '{script_name}' is in the project root directory."
        )
    return script_path


def run_launch_script(script_path: str | Path) -> None:
    """Run the launch script with bash; raise :class:`LaunchError` if it fails."""
    try:
        result = subprocess.run(["bash", str(script_path)], check=False)
    except OSError as exc:
        raise LaunchError(
            f"Error executing launch script '{script_path}': {exc}\n"
            "Ensure 'bash' is installed and in your PATH."
        ) from exc
    if result.returncode != 0:
        raise LaunchError(f"Launch script failed with status: {result.returncode}")


def count_app(
    name: str,
    seconds: int,
    sleep: Callable[[float], object] | None = None,
) -> list[str]:
    """Count once per second for ``seconds`` seconds, printing progress.

    Returns the lines that were printed.
    """
    if sleep is None:
        sleep = time.sleep
    lines: list[str] = []

    def emit(line: str) -> None:
        print(line, flush=True)
        lines.append(line)

    emit(f"{name} started. Running for {seconds} seconds...")
    for count in range(1, seconds + 1):
        emit(f"{name}: Count {count}")
        sleep(1)
    emit(f"{name} finished.")
    return lines


def _launch(executable: Path) -> int:
    print("Launcher started...")
    try:
        script_path = find_launch_script(executable, SCRIPT_NAME)
        print(f"Found launch script: {script_path}")
        print("Executing launch script...")
        run_launch_script(script_path)
    except LaunchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print("Launch script completed successfully.")

    if os.name == "posix":
        print(f"Attaching to tmux session '{TMUX_SESSION_NAME}'...", flush=True)
        try:
            os.execvp("tmux", ["tmux", "attach-session", "-t", TMUX_SESSION_NAME])
        except OSError as exc:
            print(f"Error trying to exec into tmux: {exc}", file=sys.stderr)
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the tmux launcher, or one demo app when its name is given."""
    parser = argparse.ArgumentParser(
        prog="launcher",
        description="Launch the demo apps in tmux, or run a single demo app.",
    )
    parser.add_argument("app", nargs="?", choices=sorted(APPS), help="demo app to run")
    args = parser.parse_args(argv)

    if args.app is not None:
        name, seconds = APPS[args.app]
        count_app(name, seconds)
        return 0

    return _launch(Path(sys.argv[0]).resolve())