import dataclasses as _dc
import typing as _ty
from argparse import ArgumentParser
from pathlib import Path

import yaml as _yaml

from .errors import ConfigError

__all__ = [
    "DEFAULT_RULES",
    "Options",
    "obj_to_dataclass",
    "dataclass_to_obj",
    "emit_yaml_example",
    "load_yaml",
    "build_parser",
    "options_from_arguments",
]
_T = _ty.TypeVar("_T")

DEFAULT_RULES = "/usr/mk/default.mk"


@_dc.dataclass
class Options:
    makefile: _ty.Optional[str] = None
    # None means the conventional DEFAULT_RULES, which may be absent
    default_rules: _ty.Optional[str] = None
    dry_run: bool = False
    silent: bool = False
    verbose: bool = False
    targets: list[str] = _dc.field(default_factory=list)


def _optional_arg(cls) -> _ty.Optional[type]:
    """Return X for Optional[X], else None."""
    args = _ty.get_args(cls)
    if _ty.get_origin(cls) is _ty.Union and len(args) == 2 and args[1] is type(None):
        return args[0]
    return None


def _child(key: _ty.Optional[str], name: str) -> str:
    return f"{key}.{name}" if key else name


@_dc.dataclass
class _Converter:
    """Convert plain YAML data into typed values, reporting `file:key: msg`."""

    filepath: _ty.Optional[Path]

    def error(self, msg: str, data, key: _ty.Optional[str]) -> RuntimeError:
        where = self.filepath.name if self.filepath else "<unknown>"
        if key is not None:
            where = f"{where}:{key}"
        actual = repr(data)
        if len(actual) > 80:
            actual = actual[:77] + "..."
        return RuntimeError(f"{where}: {msg}\nactual: {actual}")

    def convert(self, cls: type[_T], data, key: _ty.Optional[str] = None) -> _T:
        if _dc.is_dataclass(cls):
            return self.to_dataclass(cls, data, key)

        inner = _optional_arg(cls)
        if inner is not None:
            return None if data is None else self.convert(inner, data, _child(key, "Optional"))

        origin = _ty.get_origin(cls)
        if origin is list:
            return self.to_list(_ty.get_args(cls)[0], data, key)
        if origin is dict:
            return self.to_dict(_ty.get_args(cls) or (_ty.Any, _ty.Any), data, key)

        return self.to_scalar(cls, data, key)

    def to_dataclass(self, cls, data, key):
        if not isinstance(data, dict):
            raise self.error("expected to be dict", data, key)
        types = {f.name: f.type for f in _dc.fields(cls) if f.init}
        unknown = [k for k in data if k not in types]
        if unknown:
            raise self.error(f"unknown keys {unknown}", data, key)
        kwargs = {k: self.convert(types[k], v, _child(key, k)) for k, v in data.items()}
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise self.error(str(e), data, key) from e

    def to_list(self, item_type, data, key):
        # `inputs:` with no value is an empty list
        if data is None:
            return []
        if not isinstance(data, list):
            raise self.error("expected to be list", data, key)
        return [self.convert(item_type, item, _child(key, "list")) for item in data]

    def to_dict(self, types, data, key):
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise self.error("expected to be dict", data, key)
        key_type, value_type = types
        return {
            self.convert(key_type, k, key): self.convert(value_type, v, _child(key, str(k)))
            for k, v in data.items()
        }

    def to_scalar(self, cls, data, key):
        if cls is _ty.Any:
            return data
        if cls is bool:
            if not isinstance(data, bool):
                raise self.error("expected to be bool", data, key)
            return data
        if cls is str:
            if data is None or isinstance(data, (dict, list)):
                raise self.error("expected to be str", data, key)
            return str(data)
        try:
            return cls(data)
        except (TypeError, ValueError) as e:
            raise self.error(f"expected to be {cls}", data, key) from e


def obj_to_dataclass(cls: type[_T], data, filepath: _ty.Optional[Path] = None) -> _T:
    return _Converter(filepath).convert(cls, data)


def _field_example(field: _dc.Field) -> _ty.Any:
    if field.default is not _dc.MISSING:
        return field.default
    if field.default_factory is not _dc.MISSING:
        return field.default_factory()
    return dataclass_to_obj(field.type)


def dataclass_to_obj(cls: type[_ty.Any]) -> _ty.Any:
    if _dc.is_dataclass(cls):
        return {f.name: _field_example(f) for f in _dc.fields(cls) if f.init}
    inner = _optional_arg(cls)
    if inner is not None:
        return dataclass_to_obj(inner)
    if _ty.get_origin(cls) is list:
        return [dataclass_to_obj(_ty.get_args(cls)[0])]
    return f"{cls}"

def emit_yaml_example(cls: type[_ty.Any], filepath: Path):
    yaml_obj = dataclass_to_obj(cls)
    with open(filepath, "w") as f:
        _yaml.safe_dump(yaml_obj, f, default_flow_style=False, sort_keys=False)


def load_yaml(filepath: Path) -> _ty.Any:
    with open(filepath) as f:
        return _yaml.safe_load(f)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="umake", description="Build targets from a umakefile")
    # argparse defaults are None so that only explicit flags override --config
    parser.add_argument("-n", "--dry-run", dest="dry_run", action="store_const", const=True,
                        help="print commands without running them")
    parser.add_argument("-s", "--silent", dest="silent", action="store_const", const=True,
                        help="do not echo commands")
    parser.add_argument("-v", "--verbose", dest="verbose", action="store_const", const=True,
                        help="log every build decision")
    parser.add_argument("-d", "--default-rules", dest="default_rules", metavar="PATH",
                        help=f"system-wide rule file (default: {DEFAULT_RULES}, skipped if absent)")
    parser.add_argument("-f", "--file", dest="makefile", metavar="PATH",
                        help="project rule file")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--emit_example", type=Path, help="emit configuration example")
    parser.add_argument("targets", nargs="*", help="targets to build")
    return parser


def options_from_arguments(argv: _ty.Optional[list[str]] = None) -> Options:
    args = build_parser().parse_args(argv)

    if args.emit_example is not None:
        emit_yaml_example(Options, args.emit_example)
        raise SystemExit(0)

    options = Options()
    if args.config is not None:
        try:
            data = load_yaml(args.config)
            options = obj_to_dataclass(Options, data or {}, filepath=args.config)
        except OSError as e:
            raise ConfigError(f"{args.config}: {e.strerror or e}") from e
        except _yaml.YAMLError as e:
            raise ConfigError(f"{args.config}: {e}") from e
        except RuntimeError as e:
            raise ConfigError(str(e)) from e

    for field in ("makefile", "default_rules", "dry_run", "silent", "verbose"):
        value = getattr(args, field)
        if value is not None:
            setattr(options, field, value)
    if args.targets:
        options.targets = list(args.targets)
    return options
