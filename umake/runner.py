import logging
import typing as _ty
from pathlib import Path

from .arguments import DEFAULT_RULES, Options
from .errors import BuildError, LoadError
from .loader import load
from .make import BuildContext, Make
from .rules import Rule
from .variables import Variables

__all__ = ["MAKEFILE_NAMES", "find_makefile", "default_target", "load_rules", "run"]

_log = logging.getLogger("umake.runner")

MAKEFILE_NAMES = ("umakefile", "Makefile", "makefile")


def find_makefile(directory: _ty.Union[str, Path] = ".") -> _ty.Optional[Path]:
    for name in MAKEFILE_NAMES:
        path = Path(directory) / name
        if path.exists():
            return path
    return None


def default_target(rules: list[Rule]) -> _ty.Optional[Rule]:
    """Last explicit rule before the final entry; the final rule never qualifies."""
    found = None
    for rule in rules[:-1]:
        if not rule.is_pattern:
            found = rule
    return found


def load_rules(options: Options, variables: Variables) -> list[Rule]:
    rules: list[Rule] = []

    default_rules = Path(options.default_rules or DEFAULT_RULES)
    if options.default_rules is None and not default_rules.exists():
        _log.debug("%s: not found, skipping default rules", default_rules)
    else:
        rules.extend(load(default_rules, variables))

    makefile = Path(options.makefile) if options.makefile else find_makefile()
    if makefile is None:
        raise LoadError(f"no makefile found (tried {', '.join(MAKEFILE_NAMES)})")
    rules.extend(load(makefile, variables))
    return rules


def run(options: Options) -> int:
    variables = Variables()
    try:
        rules = load_rules(options, variables)
    except LoadError as e:
        _log.error("%s", e)
        return 1

    make = Make(
        rules,
        BuildContext(
            silent=options.silent,
            dry_run=options.dry_run,
            verbose=options.verbose,
        ),
    )

    if not options.targets:
        rule = default_target(rules)
        if rule is None:
            _log.error("no default target")
            return 1
        try:
            make.build(rule)
        except BuildError as e:
            _log.debug("%s: %s", rule.output, e)
    else:
        make.run(options.targets)

    return 1 if make.context.failed else 0
