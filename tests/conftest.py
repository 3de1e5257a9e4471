import os
from pathlib import Path

import pytest

from umake import make as _make
from umake.command import expand


def touch(path, sec: int) -> Path:
    path = Path(path)
    if not path.exists():
        path.write_text("")
    ns = sec * 1_000_000_000
    os.utime(path, ns=(ns, ns))
    return path


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def executed(monkeypatch):
    """Record expanded commands instead of running them; create each target."""
    calls = []

    def fake_run_command(template, src, target, silent=False, dry_run=False):
        calls.append(expand(template, src, target))
        if not dry_run:
            Path(target).write_text("")
        return 0

    monkeypatch.setattr(_make, "run_command", fake_run_command)
    return calls
