"""Starting a child process that reads what we write to its standard input."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence


def make_command_line(argv: Sequence[str]) -> str:
    """Quote ``argv`` into one command line that CommandLineToArgvW splits back.

    Every argument is wrapped in double quotes. Backslashes only escape when
    followed by a double quote, so runs of them are doubled only there.
    """
    if not argv:
        raise ValueError("argv must not be empty")
    quoted = []
    for arg in argv:
        out = ['"']
        backslashes = 0
        for ch in arg:
            if ch == '"':
                out.append("\\" * backslashes)
                backslashes = 0
                out.append('\\"')
            elif ch == "\\":
                backslashes += 1
                out.append("\\")
            else:
                backslashes = 0
                out.append(ch)
        out.append("\\" * backslashes)
        out.append('"')
        quoted.append("".join(out))
    return " ".join(quoted)


class Pipeline:
    """A child process whose standard input is fed by us.

    Its standard output and error are shared with the current process.
    """

    def __init__(self, argv: Sequence[str]) -> None:
        if not argv:
            raise ValueError("argv must not be empty")
        self.argv = list(argv)
        self._proc = subprocess.Popen(self.argv, stdin=subprocess.PIPE)
        self.returncode: int | None = None

    def __enter__(self) -> Pipeline:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.returncode is None:
            self.finish()

    @property
    def pid(self) -> int:
        return self._proc.pid

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Write all of ``data`` to the child's standard input."""
        stdin = self._proc.stdin
        if stdin is None or stdin.closed:
            raise ValueError("pipeline input is already closed")
        stdin.write(data)

    def finish(self) -> bool:
        """Close the child's input, wait for it, and report whether it exited with 0."""
        stdin = self._proc.stdin
        if stdin is not None and not stdin.closed:
            stdin.close()
        self.returncode = self._proc.wait()
        return self.returncode == 0