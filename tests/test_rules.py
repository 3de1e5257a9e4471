import pytest

from umake.rules import Rule, RuleKind, name_suffix


def test_rule_kind_is_decided_at_construction():
    assert Rule("app").kind is RuleKind.EXPLICIT
    assert Rule(".c.o").kind is RuleKind.SUFFIX_PAIR
    assert Rule(".o").kind is RuleKind.SINGLE_SUFFIX


def test_suffix_pair_parts():
    rule = Rule(".c.o")
    assert rule.src_suffix == ".c", f"{rule.src_suffix=}"
    assert rule.dst_suffix == ".o", f"{rule.dst_suffix=}"
    assert rule.is_pattern


def test_name_suffix_starts_at_first_dot():
    assert name_suffix("foo.o") == ".o"
    assert name_suffix("foo.tar.gz") == ".tar.gz"
    assert name_suffix("foo") is None


def test_source_for_suffix_pair():
    assert Rule(".c.o").source_for("foo.o") == "foo.c"


def test_source_for_single_suffix():
    assert Rule(".o").source_for("foo") == "foo.o"


def test_source_for_explicit_rule():
    with pytest.raises(ValueError):
        Rule("app").source_for("app")


def test_completed_is_not_part_of_equality():
    done = Rule("app", ["app.o"], ["cc"])
    done.completed = True
    assert done == Rule("app", ["app.o"], ["cc"])
