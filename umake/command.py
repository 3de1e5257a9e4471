import dataclasses as _dc
import logging
import subprocess as _sp
import sys
import typing as _ty

__all__ = ["Command", "expand", "parse", "run_command"]

_log = logging.getLogger("umake.command")

IGNORE_FAILURE = "-"
NO_ECHO = "@"


@_dc.dataclass
class Command:
    line: str
    ignore_failure: bool = False
    silent: bool = False


def expand(template: str, src: _ty.Optional[str], target: str) -> str:
    out: list[str] = []
    chars = iter(template)
    for c in chars:
        if c != "$":
            out.append(c)
            continue
        nxt = next(chars, "")
        if nxt == "@":
            out.append(target)
        elif nxt == "<":
            out.append(src or "")
        else:
            out.append("$" + nxt)
    return "".join(out)


def parse(template: str, src: _ty.Optional[str], target: str) -> Command:
    line = expand(template, src, target)
    command = Command(line)
    i = 0
    while i < len(line) and line[i] in (IGNORE_FAILURE, NO_ECHO):
        if line[i] == IGNORE_FAILURE:
            command.ignore_failure = True
        else:
            command.silent = True
        i += 1
    command.line = line[i:]
    return command


def run_command(
    template: str,
    src: _ty.Optional[str],
    target: str,
    silent: bool = False,
    dry_run: bool = False,
) -> int:
    """Run one command line; return 0 on success and 1 on failure."""
    command = parse(template, src, target)

    if not command.silent and not silent:
        print(command.line, file=sys.stderr, flush=True)

    if dry_run:
        return 0

    # stdout/stderr are inherited; only the exit status matters
    returncode = _sp.run(command.line, shell=True).returncode
    if returncode != 0:
        if command.ignore_failure:
            _log.warning("%s: Error %d (ignored)", target, returncode)
            return 0
        _log.warning("%s: Error %d", target, returncode)
        return 1
    return 0
