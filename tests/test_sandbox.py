"""Tests for the out-of-process transform script runner.

These start real worker processes with the current interpreter.
"""

import pytest

from obsidian_typst.models import ConversionError, ScriptExecutionError
from obsidian_typst.sandbox import ScriptRunner
from obsidian_typst.scripts import DEFAULT_SCRIPT


async def _echo_convert(text: str) -> str:
    return f"typst:{text}"


async def _failing_convert(text: str) -> str:
    raise ConversionError("nope")


@pytest.fixture
def runner():
    return ScriptRunner()


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------


class TestScriptRuns:
    @pytest.mark.asyncio
    async def test_sync_transform(self, runner):
        script = "def transform(content):\n    return content[::-1]\n"
        assert await runner.run(script, "abc", _echo_convert) == "cba"

    @pytest.mark.asyncio
    async def test_async_transform_delegates_to_structural(self, runner):
        script = (
            "async def transform(content):\n"
            "    body = await convert_to_typst(content.upper())\n"
            "    return '<' + body + '>'\n"
        )
        assert await runner.run(script, "hello", _echo_convert) == "<typst:HELLO>"

    @pytest.mark.asyncio
    async def test_multiple_delegations(self, runner):
        script = (
            "async def transform(content):\n"
            "    parts = [await convert_to_typst(p) for p in content.split(',')]\n"
            "    return '|'.join(parts)\n"
        )
        assert await runner.run(script, "a,b,c", _echo_convert) == "typst:a|typst:b|typst:c"

    @pytest.mark.asyncio
    async def test_content_global_is_bound(self, runner):
        script = "def transform(text):\n    return content + '!'\n"
        assert await runner.run(script, "note", _echo_convert) == "note!"

    @pytest.mark.asyncio
    async def test_host_objects_are_hidden(self, runner):
        script = (
            "def transform(content):\n"
            "    return str([app, vault, window, host, environment, converter, orchestrator])\n"
        )
        result = await runner.run(script, "", _echo_convert)
        assert result == "[None, None, None, None, None, None, None]"

    @pytest.mark.asyncio
    async def test_print_does_not_corrupt_protocol(self, runner):
        script = "print('noise')\ndef transform(content):\n    print('more noise')\n    return 'ok'\n"
        assert await runner.run(script, "", _echo_convert) == "ok"

    @pytest.mark.asyncio
    async def test_unicode_round_trip(self, runner):
        script = "def transform(content):\n    return content + ' ☑'\n"
        assert await runner.run(script, "naïve – ok", _echo_convert) == "naïve – ok ☑"

    @pytest.mark.asyncio
    async def test_delegation_error_reaches_script(self, runner):
        script = (
            "async def transform(content):\n"
            "    try:\n"
            "        return await convert_to_typst(content)\n"
            "    except Exception as exc:\n"
            "        return 'caught: ' + str(exc)\n"
        )
        assert await runner.run(script, "x", _failing_convert) == "caught: nope"

    @pytest.mark.asyncio
    async def test_default_script(self, runner):
        result = await runner.run(DEFAULT_SCRIPT, "# Hi", _echo_convert, script_name="default")
        assert result.startswith("#set page(")
        assert result.endswith("typst:# Hi")


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestScriptFailures:
    @pytest.mark.asyncio
    async def test_missing_transform(self, runner):
        with pytest.raises(ScriptExecutionError, match="Script must define a transform\\(\\) function"):
            await runner.run("x = 1\n", "", _echo_convert)

    @pytest.mark.asyncio
    async def test_script_exception(self, runner):
        script = "def transform(content):\n    raise ValueError('boom')\n"
        with pytest.raises(ScriptExecutionError) as exc_info:
            await runner.run(script, "", _echo_convert, script_name="broken")
        assert str(exc_info.value) == "Script execution failed: boom"
        assert exc_info.value.script_name == "broken"

    @pytest.mark.asyncio
    async def test_syntax_error(self, runner):
        with pytest.raises(ScriptExecutionError, match="Script execution failed"):
            await runner.run("def transform(:\n", "", _echo_convert)

    @pytest.mark.asyncio
    async def test_non_string_result(self, runner):
        script = "def transform(content):\n    return 42\n"
        with pytest.raises(ScriptExecutionError, match="must return a string, not int"):
            await runner.run(script, "", _echo_convert)

    @pytest.mark.asyncio
    async def test_process_exit(self, runner):
        script = "import sys\nsys.exit(3)\n"
        with pytest.raises(ScriptExecutionError, match="exited unexpectedly \\(exit code 3\\)"):
            await runner.run(script, "", _echo_convert)

    @pytest.mark.asyncio
    async def test_unhandled_delegation_error(self, runner):
        script = "async def transform(content):\n    return await convert_to_typst(content)\n"
        with pytest.raises(ScriptExecutionError, match="nope"):
            await runner.run(script, "x", _failing_convert)

    @pytest.mark.asyncio
    async def test_oversized_result(self, runner):
        script = "def transform(content):\n    return 'x' * (17 * 1024 * 1024)\n"
        with pytest.raises(ScriptExecutionError, match="message exceeded") as exc_info:
            await runner.run(script, "", _echo_convert, script_name="huge")
        assert exc_info.value.script_name == "huge"

    @pytest.mark.asyncio
    async def test_missing_interpreter(self, tmp_path):
        runner = ScriptRunner(python=str(tmp_path / "no-python"))
        with pytest.raises(ScriptExecutionError, match="could not start script worker"):
            await runner.run("def transform(c):\n    return c\n", "", _echo_convert)

    @pytest.mark.asyncio
    async def test_error_is_a_conversion_error(self, runner):
        with pytest.raises(ConversionError):
            await runner.run("x = 1\n", "", _echo_convert)
