import logging
import re
import subprocess
import time
from typing import Callable

from errors import ComposeError
from telemetry import traced
from utils import output_tail

_ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")


def _strip_ansi(value: str) -> str:
    return _ANSI_RE.sub("", value)


class ComposeController:
    """Drives one docker-compose service through the compose CLI."""

    def __init__(
        self,
        compose_path: str,
        compose_file: str,
        service_name: str,
        *,
        restart_delay: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.compose_path = compose_path
        self.compose_file = compose_file
        self.service_name = service_name
        self.restart_delay = max(0.0, float(restart_delay))
        self._sleep = sleep

    def command(self, *args: str) -> list[str]:
        return [self.compose_path, "-f", self.compose_file, *args, self.service_name]

    def _run(self, *args: str) -> str:
        cmd = self.command(*args)
        logging.info("Running %s", " ".join(cmd))
        with traced("compose." + args[0], service=self.service_name):
            try:
                result = subprocess.run(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                )
            except OSError as exc:
                logging.error("Failed to start %s: %s", self.compose_path, exc)
                raise ComposeError(cmd, None, str(exc)) from exc
        output = _strip_ansi(result.stdout or "")
        if result.returncode != 0:
            tail = output_tail(output)
            logging.error(
                "%s failed with exit code %s", " ".join(cmd), result.returncode
            )
            if tail:
                logging.error("Output tail:\n%s", tail)
            raise ComposeError(cmd, result.returncode, tail)
        return output

    def restart(self) -> None:
        self._run("restart")

    def wait_for_restart(self) -> None:
        if self.restart_delay <= 0:
            return
        logging.info("Wait for restart (%.0fs)", self.restart_delay)
        self._sleep(self.restart_delay)

    def update_server(self) -> None:
        self._run("pull")
        self._run("up", "-d")
