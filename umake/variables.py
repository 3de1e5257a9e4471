import re
import typing as _ty

__all__ = ["DEFAULTS", "Variables"]

DEFAULTS = {
    "CPPFLAGS": "",
    "CFLAGS": "-g",
    "LD": "ld",
    "AS": "as",
    "CC": "cc",
}

_REFERENCE = re.compile(r"\$(?:\(([^()$]*)\)|\{([^{}$]*)\})")
_MAX_EXPANSION_DEPTH = 32


class Variables:
    """Name to value table; only `$(NAME)` and `${NAME}` are expanded."""

    def __init__(self, defaults: _ty.Optional[dict[str, str]] = None):
        self._values: dict[str, str] = {}
        for name, value in (DEFAULTS if defaults is None else defaults).items():
            self.setvar(name, value)

    def setvar(self, name: str, value: str) -> None:
        self._values[name] = value

    def getvar(self, name: str) -> str:
        return self._values.get(name, "")

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def expand(self, text: str, _depth: int = 0) -> str:
        if _depth > _MAX_EXPANSION_DEPTH:
            raise RecursionError(f"variable expansion too deep in {text!r}")

        def replace(m: re.Match) -> str:
            name = (m.group(1) if m.group(1) is not None else m.group(2)).strip()
            return self.expand(self.getvar(name), _depth + 1)

        return _REFERENCE.sub(replace, text)
