"""Open a mount point in the platform file browser."""
import logging
import shutil
import subprocess
import sys
from pathlib import Path

from ..exceptions import CommandFailedError

logger = logging.getLogger("autounlock")


def _browser_command() -> list[str]:
    if sys.platform == "darwin":
        return ["open"]
    if sys.platform == "win32":
        return ["explorer"]
    return ["xdg-open"]


class SystemRevealer:
    """Reveals mount points with ``open``, ``explorer`` or ``xdg-open``.

    Drivers can delegate their ``reveal`` to an instance of this class.
    """

    def __init__(self, command: list[str] | None = None, timeout: float = 10.0):
        self._command = command or _browser_command()
        self._timeout = timeout

    def reveal(self, mount_point: Path) -> None:
        """Open ``mount_point``.

        Raises:
            CommandFailedError: If the command is missing, times out or fails.
        """
        if shutil.which(self._command[0]) is None:
            raise CommandFailedError(f"Command not found: {self._command[0]}")
        args = [*self._command, str(mount_point)]
        try:
            result = subprocess.run(
                args, capture_output=True, text=True, timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as err:
            raise CommandFailedError(f"{' '.join(args)}: {err}") from err
        # explorer.exe exits with 1 even on success
        if result.returncode != 0 and self._command[0] != "explorer":
            raise CommandFailedError(
                f"{' '.join(args)} exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        logger.debug("Revealed %s", mount_point)
