from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

STDERR_TAIL_CHARS = 500


def run_tool(command: list[str], label: str) -> None:
    """Run an external media tool to completion; a non-zero exit raises ``RuntimeError``."""

    logger.debug("Running %s: %s", label, " ".join(command))
    try:
        completed = subprocess.run(command, check=False, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise RuntimeError(f"{label} executable was not found: {command[0]}. Install it so it is available on PATH.") from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()[-STDERR_TAIL_CHARS:]
        logger.warning("%s exited with code %s: %s", label, completed.returncode, stderr)
        details = f": {stderr}" if stderr else ""
        raise RuntimeError(f"{label} exited with code {completed.returncode}{details}")


def clear_output(path: Path) -> None:
    # fixed output names; a leftover from an earlier run must not pass require_output
    path.unlink(missing_ok=True)


def require_output(path: Path, stage: str) -> Path:
    if not path.exists():
        raise RuntimeError(f"{stage} generation failed: {path} does not exist")
    return path
