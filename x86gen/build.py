"""Build driver — links generated assembly with the runtime into an executable."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Callable, Mapping

from .compile_types import BuildConfig, BuildResult
from . import constants

logger = logging.getLogger(__name__)


def resolve_runtime_dir(
    config: BuildConfig, environ: Mapping[str, str] | None = None
) -> str:
    """Explicit config wins, then $SM_RUNTIME, then the default relative path."""
    if config.runtime_dir:
        return config.runtime_dir
    env = os.environ if environ is None else environ
    return env.get(constants.RUNTIME_ENV_VAR) or constants.DEFAULT_RUNTIME_DIR


def executable_path(asm_path: Path | str) -> Path:
    return Path(asm_path).with_suffix("")


def build_command(
    asm_path: Path | str,
    config: BuildConfig,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    runtime = Path(resolve_runtime_dir(config, environ)) / config.runtime_object
    return [
        config.compiler,
        *config.flags,
        "-o",
        str(executable_path(asm_path)),
        str(runtime),
        str(asm_path),
    ]


def build_executable(
    asm_path: Path | str,
    config: BuildConfig,
    runner: Callable[..., Any] = subprocess.run,
    environ: Mapping[str, str] | None = None,
) -> BuildResult:
    """Run the external assembler/linker once on *asm_path*.

    Args:
        asm_path: The generated assembly file.
        config: Compiler, flags and runtime location.
        runner: ``subprocess.run``-compatible callable (injectable for tests).
        environ: Environment used to resolve the runtime directory.

    Returns:
        A BuildResult; tool failures are reported, not raised.
    """
    command = build_command(asm_path, config, environ)
    logger.info("Building: %s", " ".join(command))
    try:
        completed = runner(command, capture_output=True, text=True)
    except FileNotFoundError as exc:
        logger.warning("Build tool not found: %s", exc)
        return BuildResult(success=False, command=command, stderr=str(exc))

    if completed.returncode != 0:
        logger.warning(
            "Build failed (exit %d): %s", completed.returncode, completed.stderr
        )
    return BuildResult(
        success=completed.returncode == 0,
        command=command,
        returncode=completed.returncode,
        stderr=completed.stderr or "",
    )
