"""Runs transform scripts in a separate Python process.

Each run starts a fresh interpreter (``-I``: no ``PYTHON*`` variables, no
user site directory, script directory off ``sys.path``) in a throwaway
working directory with a scrubbed environment. The process boundary is the
isolation: the worker shares no objects with the host.
The script only sees its input text, the ``convert_to_typst`` callback and
host names bound to ``None``; the callback is served here, in the parent.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Awaitable, Callable

from obsidian_typst.models import ScriptExecutionError

logger = logging.getLogger(__name__)

WORKER_PATH = Path(__file__).with_name("_worker.py")
# Whole documents travel as single JSON lines
STREAM_LIMIT = 16 * 1024 * 1024
_PASSTHROUGH_ENV = ("PATH", "SYSTEMROOT")

ConvertFn = Callable[[str], Awaitable[str]]


def _scrubbed_env() -> dict[str, str]:
    env = {name: os.environ[name] for name in _PASSTHROUGH_ENV if name in os.environ}
    env["PYTHONIOENCODING"] = "utf-8"
    return env


class ScriptRunner:
    """Executes ``transform(content)`` from user supplied script source."""

    def __init__(self, python: str | None = None) -> None:
        self._python = python or sys.executable

    async def run(
        self,
        script_source: str,
        content: str,
        convert: ConvertFn,
        script_name: str | None = None,
    ) -> str:
        """Run the script and return the text its ``transform`` produced.

        Every failure, including a crashed worker, is raised as
        ``ScriptExecutionError``. Cancelling the call kills the worker.
        """
        with tempfile.TemporaryDirectory(prefix="obsidian-typst-") as workdir:
            try:
                process = await asyncio.create_subprocess_exec(
                    self._python,
                    "-I",
                    "-X",
                    "utf8",
                    str(WORKER_PATH),
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=workdir,
                    env=_scrubbed_env(),
                    limit=STREAM_LIMIT,
                )
            except OSError as exc:
                raise ScriptExecutionError(f"could not start script worker: {exc}", script_name) from exc

            logger.debug("started script worker pid=%s for %s", process.pid, script_name or "<inline>")
            stderr_task = asyncio.create_task(process.stderr.read())
            try:
                return await self._converse(process, script_source, content, convert, script_name)
            finally:
                if process.returncode is None:
                    process.kill()
                await process.wait()
                output = await stderr_task
                if output:
                    logger.debug("script %s output:\n%s", script_name or "<inline>", output.decode("utf-8", "replace"))

    async def _converse(
        self,
        process: asyncio.subprocess.Process,
        script_source: str,
        content: str,
        convert: ConvertFn,
        script_name: str | None,
    ) -> str:
        await self._send(process, {"type": "run", "script": script_source, "content": content}, script_name)

        while True:
            try:
                line = await process.stdout.readline()
            except ValueError as exc:
                raise ScriptExecutionError(
                    f"script worker message exceeded {STREAM_LIMIT} bytes", script_name
                ) from exc
            if not line:
                code = await process.wait()
                raise ScriptExecutionError(f"script worker exited unexpectedly (exit code {code})", script_name)

            try:
                message = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ScriptExecutionError(f"malformed message from script worker: {exc}", script_name) from exc

            kind = message.get("type")
            if kind == "result":
                text = message.get("text")
                if not isinstance(text, str):
                    raise ScriptExecutionError("script worker returned no text", script_name)
                return text
            if kind == "error":
                raise ScriptExecutionError(str(message.get("message", "unknown error")), script_name)
            if kind == "convert":
                await self._send(process, await self._delegate(convert, message), script_name)
                continue

            raise ScriptExecutionError(f"unexpected message from script worker: {kind!r}", script_name)

    async def _delegate(self, convert: ConvertFn, message: dict[str, Any]) -> dict[str, Any]:
        try:
            converted = await convert(str(message.get("text", "")))
        except Exception as exc:
            logger.warning("structural conversion requested by script failed", exc_info=True)
            return {"type": "convert_error", "message": str(exc) or type(exc).__name__}
        return {"type": "converted", "text": converted}

    async def _send(
        self,
        process: asyncio.subprocess.Process,
        message: dict[str, Any],
        script_name: str | None,
    ) -> None:
        try:
            process.stdin.write((json.dumps(message) + "\n").encode("utf-8"))
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise ScriptExecutionError(f"script worker closed its input: {exc}", script_name) from exc
