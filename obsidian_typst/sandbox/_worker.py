"""Child process that runs a single transform script.

Started by path in isolated mode, so it imports nothing from the package.
It reads one ``run`` request from stdin, answers with a ``result`` or
``error`` message on stdout, and may send ``convert`` requests in between,
each answered by the host with ``converted`` or ``convert_error``. Anything
the script prints goes to stderr.
"""

import asyncio
import inspect
import json
import sys
import traceback

HOST_NAMES = ("app", "vault", "window", "host", "environment", "converter", "orchestrator")
MISSING_TRANSFORM = "Script must define a transform() function"


class Channel:
    def __init__(self, reader, writer):
        self._reader = reader
        self._writer = writer

    def send(self, message):
        self._writer.write(json.dumps(message) + "\n")
        self._writer.flush()

    def receive(self):
        line = self._reader.readline()
        if not line:
            raise EOFError("host closed the channel")
        return json.loads(line)


class ConversionFailed(Exception):
    pass


def build_namespace(content, channel):
    async def convert_to_typst(text):
        channel.send({"type": "convert", "text": str(text)})
        reply = channel.receive()
        if reply.get("type") == "converted":
            return reply.get("text", "")
        raise ConversionFailed(reply.get("message", "structural conversion failed"))

    namespace = {
        "__name__": "__transform_script__",
        "content": content,
        "convert_to_typst": convert_to_typst,
    }
    for name in HOST_NAMES:
        namespace[name] = None
    return namespace


async def _resolve(value):
    return await value


def run_script(script, content, channel):
    namespace = build_namespace(content, channel)
    exec(compile(script, "<transform script>", "exec"), namespace)

    transform = namespace.get("transform")
    if not callable(transform):
        raise LookupError(MISSING_TRANSFORM)

    result = transform(content)
    if inspect.isawaitable(result):
        result = asyncio.run(_resolve(result))
    if not isinstance(result, str):
        raise TypeError(f"transform() must return a string, not {type(result).__name__}")
    return result


def main():
    channel = Channel(sys.stdin, sys.stdout)
    # Script prints must not corrupt the message stream
    sys.stdout = sys.stderr

    try:
        request = channel.receive()
        if request.get("type") != "run":
            raise ValueError(f"unexpected request {request.get('type')!r}")
        text = run_script(request.get("script", ""), request.get("content", ""), channel)
    except Exception as exc:
        traceback.print_exc(file=sys.stderr)
        channel.send({"type": "error", "message": str(exc) or type(exc).__name__})
        return 1

    channel.send({"type": "result", "text": text})
    return 0


if __name__ == "__main__":
    sys.exit(main())
