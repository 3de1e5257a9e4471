import dataclasses as _dc
import logging
import typing as _ty

from . import timestamps as _ts
from .command import run_command
from .errors import BuildError, NoRuleError, PrerequisiteError, RecursionLimitError
from .rules import Rule, RuleKind, name_suffix

__all__ = ["MAX_DEPTH", "BuildContext", "Make"]

_log = logging.getLogger("umake.make")

MAX_DEPTH = 10


@_dc.dataclass
class BuildContext:
    silent: bool = False
    dry_run: bool = False
    verbose: bool = False
    # set only by resolution failures; drives the exit status
    failed: bool = False
    # shared by the whole traversal, not per branch
    depth: int = 0
    max_depth: int = MAX_DEPTH
    # exit statuses of failed command lines, kept apart from `failed`
    command_failures: list[tuple[str, str]] = _dc.field(default_factory=list)


@_dc.dataclass
class Make:
    rules: list[Rule]
    context: BuildContext = _dc.field(default_factory=BuildContext)

    def _trace(self, rule: Rule, src: _ty.Optional[str], target: str) -> None:
        if not self.context.verbose:
            return
        _log.info("making %s: %s (%s)", target, src if src is not None else "-", rule.output)
        for name in rule.inputs:
            _log.info("making %s: input %s", target, name)

    def find_rule(self, name: str) -> _ty.Optional[tuple[Rule, _ty.Optional[str]]]:
        """Return the rule for `name` and the source it implies, or None."""
        for rule in self.rules:
            if rule.kind is RuleKind.EXPLICIT and rule.output == name:
                return rule, None

        # first match wins; no best-match ranking
        suffix = name_suffix(name)
        if suffix is not None:
            for rule in self.rules:
                if rule.kind is RuleKind.SUFFIX_PAIR and rule.dst_suffix == suffix:
                    return rule, rule.source_for(name)
        else:
            for rule in self.rules:
                if rule.kind is RuleKind.SINGLE_SUFFIX:
                    return rule, rule.source_for(name)
        return None

    def make_by_name(self, name: str) -> None:
        found = self.find_rule(name)
        if found is not None:
            rule, src = found
            if rule.is_pattern:
                self.build(rule, src, name)
            else:
                self.build(rule)
            return

        if _ts.exists(name):
            return

        self.context.failed = True
        e = NoRuleError(name)
        _log.error("%s", e)
        raise e

    def build(
        self,
        rule: Rule,
        src: _ty.Optional[str] = None,
        target: _ty.Optional[str] = None,
    ) -> None:
        if rule.completed:
            return

        ctx = self.context
        ctx.depth += 1
        try:
            if ctx.depth > ctx.max_depth:
                e = RecursionLimitError(target or rule.output, ctx.max_depth)
                _log.error("%s", e)
                raise e
            self._build(rule, src, target)
        finally:
            ctx.depth -= 1

    def _build(self, rule: Rule, src: _ty.Optional[str], target: _ty.Optional[str]) -> None:
        if src is None and rule.inputs:
            src = rule.inputs[0]
        if target is None:
            target = rule.output

        ctx = self.context
        self._trace(rule, src, target)

        newest = _ts.EPOCH
        failed = False
        for name in rule.inputs:
            try:
                self.make_by_name(name)
            except BuildError:
                failed = True
            t = _ts.mtime(name)
            if t is not None and _ts.is_older(newest, t):
                newest = t
        t = _ts.mtime(src)
        if t is not None and _ts.is_older(newest, t):
            newest = t

        if failed:
            raise PrerequisiteError(target)

        if src is not None:
            t = _ts.mtime(target)
            if t is not None and not _ts.is_older(t, newest):
                _log.debug("%s is up to date", target)
                return

        for template in rule.commands:
            # a failing line does not stop the rule or fail it
            if run_command(template, src, target, silent=ctx.silent, dry_run=ctx.dry_run):
                ctx.command_failures.append((target, template))

        if not rule.is_pattern:
            rule.completed = True

    def run(self, names: list[str]) -> bool:
        for name in names:
            try:
                self.make_by_name(name)
            except BuildError as e:
                _log.debug("%s: %s", name, e)
        return not self.context.failed