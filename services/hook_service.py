"""
services/hook_service.py

Responsibility: Runs the user's hook command in a host shell after a record
changed, exposing DOMAIN, NEW_IP and OLD_IP as environment variables.
Does NOT: decide when a hook should run or which command applies to a domain.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from exceptions import HookExecutionError

logger = logging.getLogger(__name__)


def _shell_argv(command: str) -> list[str]:
    if sys.platform == "win32":
        return ["powershell", "-ExecutionPolicy", "Bypass", "-Command", command]
    return ["bash", "-c", command]


class HookService:
    """
    Executes hook commands as subprocesses of the daemon.

    The subprocess inherits the daemon's environment. Output is captured and
    logged once the command finishes.
    """

    async def run(self, command: str, domain: str, new_ip: str, old_ip: str) -> None:
        """
        Runs command with DOMAIN, NEW_IP and OLD_IP set.

        Args:
            command: The shell command line.
            domain: The domain whose record changed.
            new_ip: The address the record now points at.
            old_ip: The previous address; empty when the record was created.

        Raises:
            HookExecutionError: If the command cannot be started or exits
                with a non-zero status.
        """
        logger.info("Executing hook command for domain %s: %s", domain, command)

        env = {**os.environ, "DOMAIN": domain, "NEW_IP": new_ip, "OLD_IP": old_ip}
        try:
            process = await asyncio.create_subprocess_exec(
                *_shell_argv(command),
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as exc:
            raise HookExecutionError(f"Failed to execute hook command: {exc}") from exc

        out = stdout.decode(errors="replace").strip()
        err = stderr.decode(errors="replace").strip()

        if process.returncode != 0:
            raise HookExecutionError(
                f"Hook command failed with exit code {process.returncode}: {err}"
            )

        if out:
            logger.info("Hook command stdout: %s", out)
        if err:
            logger.info("Hook command stderr: %s", err)
        logger.info("Hook command executed successfully for domain %s", domain)
