"""Rule-file loading.

Two syntaxes are understood. Plain makefile text::

    # comment
    CFLAGS = -O2
    app: app.o util.o
    \tcc -o $@ app.o util.o
    .c.o:
    \t$(CC) $(CFLAGS) -c $< -o $@

and YAML files (``*.yaml`` / ``*.yml``)::

    variables:
      CFLAGS: -O2
    rules:
      - output: app
        inputs: [app.o]
        commands: ["cc -o $@ $<"]

Variable references are expanded while loading; ``$@``, ``$<`` and every
other ``$`` sequence are left for the command executor.
"""

import dataclasses as _dc
import logging
import re
import typing as _ty
from pathlib import Path

import yaml as _yaml

from .arguments import load_yaml, obj_to_dataclass
from .errors import LoadError
from .rules import Rule
from .variables import Variables

__all__ = ["RuleSpec", "RuleFile", "load", "loads", "load_yaml_rules"]

_log = logging.getLogger("umake.loader")

_ASSIGNMENT = re.compile(r"^([A-Za-z_][A-Za-z0-9_.]*)\s*:?=(.*)$")
_YAML_SUFFIXES = (".yaml", ".yml")


@_dc.dataclass
class RuleSpec:
    output: str
    inputs: list[str] = _dc.field(default_factory=list)
    commands: list[str] = _dc.field(default_factory=list)


@_dc.dataclass
class RuleFile:
    variables: dict[str, str] = _dc.field(default_factory=dict)
    rules: list[RuleSpec] = _dc.field(default_factory=list)


def _logical_lines(text: str) -> _ty.Iterator[tuple[int, str]]:
    """Yield (line number, line) with backslash continuations joined."""
    pending: list[str] = []
    start = 0
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not pending:
            start = lineno
        if line.endswith("\\"):
            pending.append(line[:-1])
            continue
        pending.append(line)
        yield start, " ".join(pending) if len(pending) > 1 else pending[0]
        pending = []
    if pending:
        yield start, " ".join(pending)


def _strip_comment(line: str) -> str:
    i = line.find("#")
    return line if i < 0 else line[:i]


def loads(text: str, variables: Variables, filename: str = "<string>") -> list[Rule]:
    rules: list[Rule] = []
    current: list[Rule] = []

    def error(lineno: int, msg: str) -> LoadError:
        return LoadError(f"{filename}:{lineno}: {msg}")

    for lineno, line in _logical_lines(text):
        try:
            if line.startswith("\t"):
                command = line[1:].strip()
                if not command:
                    continue
                if not current:
                    raise error(lineno, "command outside of a rule")
                command = variables.expand(command).strip()
                for rule in current:
                    rule.commands.append(command)
                continue

            line = _strip_comment(line).strip()
            if not line:
                continue

            m = _ASSIGNMENT.match(line)
            if m:
                name, value = m.group(1), m.group(2).strip()
                variables.setvar(name, variables.expand(value).strip())
                _log.debug("%s:%d: %s = %r", filename, lineno, name, variables.getvar(name))
                current = []
                continue

            if ":" not in line:
                raise error(lineno, f"missing separator in {line!r}")

            outputs, _, inputs = variables.expand(line).partition(":")
            names = outputs.split()
            if not names:
                raise error(lineno, "rule without a target")
            prerequisites = inputs.split()
            current = [Rule(name, list(prerequisites)) for name in names]
            rules.extend(current)
        except RecursionError as e:
            raise error(lineno, str(e)) from e

    return rules


def load_yaml_rules(path: Path, variables: Variables) -> list[Rule]:
    try:
        data = load_yaml(path)
    except OSError as e:
        raise LoadError(f"{path}: {e.strerror or e}") from e
    except _yaml.YAMLError as e:
        raise LoadError(f"{path}: {e}") from e

    try:
        rule_file = obj_to_dataclass(RuleFile, data or {}, filepath=path)
    except RuntimeError as e:
        raise LoadError(str(e)) from e

    try:
        for name, value in rule_file.variables.items():
            variables.setvar(name, variables.expand(value))
        return [
            Rule(
                variables.expand(rule.output).strip(),
                [variables.expand(i) for i in rule.inputs],
                [variables.expand(c) for c in rule.commands],
            )
            for rule in rule_file.rules
        ]
    except RecursionError as e:
        raise LoadError(f"{path}: {e}") from e


def load(path: _ty.Union[str, Path], variables: Variables) -> list[Rule]:
    path = Path(path)
    if path.suffix in _YAML_SUFFIXES:
        rules = load_yaml_rules(path, variables)
    else:
        try:
            text = path.read_text()
        except OSError as e:
            raise LoadError(f"{path}: {e.strerror or e}") from e
        rules = loads(text, variables, filename=str(path))
    _log.debug("%s: loaded %d rules", path, len(rules))
    return rules
