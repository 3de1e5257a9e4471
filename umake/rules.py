import dataclasses as _dc
import enum
import typing as _ty

__all__ = ["SUFFIX_MARK", "RuleKind", "Rule", "name_suffix"]

SUFFIX_MARK = "."


class RuleKind(enum.Enum):
    EXPLICIT = "explicit"
    SUFFIX_PAIR = "suffix_pair"
    SINGLE_SUFFIX = "single_suffix"


def name_suffix(name: str) -> _ty.Optional[str]:
    """Return everything from the first '.' of `name`, or None."""
    i = name.find(SUFFIX_MARK)
    return name[i:] if i >= 0 else None


@_dc.dataclass
class Rule:
    output: str
    inputs: list[str] = _dc.field(default_factory=list)
    commands: list[str] = _dc.field(default_factory=list)
    completed: bool = _dc.field(default=False, compare=False)
    kind: RuleKind = _dc.field(init=False, default=RuleKind.EXPLICIT, compare=False)
    src_suffix: _ty.Optional[str] = _dc.field(init=False, default=None, repr=False)
    dst_suffix: _ty.Optional[str] = _dc.field(init=False, default=None, repr=False)

    def __post_init__(self):
        if not self.output.startswith(SUFFIX_MARK):
            self.kind = RuleKind.EXPLICIT
            return

        # `.c.o`: source suffix `.c`, destination suffix `.o`
        second = self.output.find(SUFFIX_MARK, 1)
        if second < 0:
            self.kind = RuleKind.SINGLE_SUFFIX
            self.src_suffix = self.output
        else:
            self.kind = RuleKind.SUFFIX_PAIR
            self.src_suffix = self.output[:second]
            self.dst_suffix = self.output[second:]

    @property
    def is_pattern(self) -> bool:
        return self.kind is not RuleKind.EXPLICIT

    def source_for(self, name: str) -> str:
        """Synthesize the source name this pattern rule implies for `name`."""
        match self.kind:
            case RuleKind.SUFFIX_PAIR:
                suffix = name_suffix(name) or ""
                return name[: len(name) - len(suffix)] + self.src_suffix
            case RuleKind.SINGLE_SUFFIX:
                return name + self.src_suffix
            case _:
                raise ValueError(f"{self.output!r} is not a pattern rule")
