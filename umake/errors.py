__all__ = [
    "UmakeError",
    "LoadError",
    "ConfigError",
    "BuildError",
    "NoRuleError",
    "RecursionLimitError",
    "PrerequisiteError",
]


class UmakeError(RuntimeError):
    pass


class LoadError(UmakeError):
    pass


class BuildError(UmakeError):
    pass


class NoRuleError(BuildError):
    def __init__(self, name: str):
        super().__init__(f"{name}: No rule to make target")
        self.name = name


class RecursionLimitError(BuildError):
    def __init__(self, target: str, limit: int):
        super().__init__(f"{target}: recursion limit exceeded ({limit})")
        self.target = target
        self.limit = limit


class PrerequisiteError(BuildError):
    """A prerequisite of the target failed; already reported where it happened."""

    def __init__(self, target: str):
        super().__init__(f"{target}: prerequisite failed")
        self.target = target


class ConfigError(UmakeError):
    pass
