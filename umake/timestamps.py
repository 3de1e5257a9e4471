import os
import typing as _ty

__all__ = ["Timestamp", "EPOCH", "is_older", "mtime", "exists"]


class Timestamp(_ty.NamedTuple):
    sec: int
    nsec: int


EPOCH = Timestamp(0, 0)


def is_older(a: Timestamp, b: Timestamp) -> bool:
    if a.sec < b.sec:
        return True
    if a.sec > b.sec:
        return False
    return a.nsec < b.nsec


def mtime(path: _ty.Optional[str]) -> _ty.Optional[Timestamp]:
    if path is None:
        return None
    try:
        st = os.stat(path)
    except OSError:
        return None
    return Timestamp(*divmod(st.st_mtime_ns, 1_000_000_000))


def exists(path: str) -> bool:
    # follows symlinks: a dangling link is not a satisfied prerequisite
    return os.path.exists(path)
