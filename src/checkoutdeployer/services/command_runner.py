"""Subprocess execution service for checkoutdeployer."""

import subprocess
from typing import List, Optional

from checkoutdeployer.errors import DeployerError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, subprocess_module=subprocess):
        self.logger = logger
        self.subprocess = subprocess_module

    def run(
        self,
        cmd: List[str],
        cwd: Optional[str] = None,
        capture_output: bool = True,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = self.subprocess.run(
                cmd,
                cwd=cwd,
                text=True,
                capture_output=capture_output,
            )
        except FileNotFoundError as exc:
            raise DeployerError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except OSError as exc:
            raise DeployerError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"
        raise DeployerError(message)
