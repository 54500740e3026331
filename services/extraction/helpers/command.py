"""Bounded execution of external commands (pdftoppm, yt-dlp, ...)."""

import asyncio
import contextlib

from pydantic import BaseModel

from shared.models.errors import CommandTimeoutError, ExtractionError


class CommandResult(BaseModel):
    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(args: list[str], timeout: float, check: bool = False) -> CommandResult:
    """Run an external command and wait for it at most `timeout` seconds.

    The process is killed when the timeout expires or the calling task is
    cancelled, so no child outlives the call.

    Args:
        args (list[str]): Program and arguments. No shell is involved.
        timeout (float): Seconds before the process is killed.
        check (bool): Raise if the command exits with a non-zero status.

    Returns:
        CommandResult: Exit status and decoded output.

    Raises:
        ExtractionError: If the program is not installed, or check is set and the command failed.
        CommandTimeoutError: If the command did not finish in time.
    """
    program = args[0]
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise ExtractionError(f"'{program}' is not installed or not found in PATH.") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise CommandTimeoutError(f"'{program}' did not finish within {timeout:.0f}s.") from exc
    finally:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()

    result = CommandResult(
        args=list(args),
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    if check and not result.ok:
        raise ExtractionError(f"'{program}' exited with status {result.returncode}: {result.stderr.strip()[:500]}")
    return result
