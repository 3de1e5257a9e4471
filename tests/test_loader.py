from textwrap import dedent

import pytest

from umake.errors import LoadError
from umake.loader import load, loads
from umake.rules import Rule, RuleKind
from umake.variables import Variables


def test_loads_rules_and_commands():
    text = dedent("""
        # link
        app: app.o util.o
        \tcc -o $@ app.o util.o

        .c.o:
        \t-@$(CC) $(CFLAGS) -c $< -o $@
        """)
    rules = loads(text, Variables())
    assert rules == [
        Rule("app", ["app.o", "util.o"], ["cc -o $@ app.o util.o"]),
        Rule(".c.o", [], ["-@cc -g -c $< -o $@"]),
    ], f"{rules=}"
    assert rules[1].kind is RuleKind.SUFFIX_PAIR


def test_assignment_overrides_default():
    variables = Variables()
    rules = loads("CC = gcc\nCFLAGS := -O2 $(CPPFLAGS)\nx:\n\t$(CC) ${CFLAGS}\n", variables)
    assert variables.getvar("CC") == "gcc"
    assert rules[0].commands == ["gcc -O2"], f"{rules[0].commands=}"


def test_prerequisites_are_expanded():
    variables = Variables({"OBJS": "a.o b.o"})
    rules = loads("prog: $(OBJS)\n", variables)
    assert rules[0].inputs == ["a.o", "b.o"], f"{rules[0].inputs=}"


def test_multiple_outputs_share_commands():
    rules = loads("a b: c\n\ttouch $@\n", Variables())
    assert [r.output for r in rules] == ["a", "b"]
    assert all(r.commands == ["touch $@"] for r in rules)
    assert all(r.inputs == ["c"] for r in rules)


def test_line_continuation():
    rules = loads("app: a.o \\\n  b.o\n", Variables())
    assert rules[0].inputs == ["a.o", "b.o"], f"{rules[0].inputs=}"


def test_trailing_comment_on_rule_line():
    rules = loads("app: a.o # main program\n", Variables())
    assert rules[0].inputs == ["a.o"]


def test_command_outside_rule():
    with pytest.raises(LoadError, match=r"mk:1: command outside of a rule"):
        loads("\techo hi\n", Variables(), filename="mk")


def test_missing_separator():
    with pytest.raises(LoadError, match=r"mk:2: missing separator"):
        loads("a: b\njunk\n", Variables(), filename="mk")


def test_load_missing_file(tmp_path):
    with pytest.raises(LoadError):
        load(tmp_path / "nothing.mk", Variables())


def test_load_text_file(tmp_path):
    path = tmp_path / "umakefile"
    path.write_text("all: x\n\techo $@\n")
    rules = load(path, Variables())
    assert rules == [Rule("all", ["x"], ["echo $@"])], f"{rules=}"


def test_load_yaml_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(dedent("""
        variables:
          CC: clang
        rules:
          - output: app
            inputs: [app.o]
            commands: ["$(CC) -o $@ $<"]
          - output: .c.o
            commands: ["$(CC) -c $< -o $@"]
        """))
    variables = Variables()
    rules = load(path, variables)
    assert variables.getvar("CC") == "clang"
    assert rules == [
        Rule("app", ["app.o"], ["clang -o $@ $<"]),
        Rule(".c.o", [], ["clang -c $< -o $@"]),
    ], f"{rules=}"


def test_load_yaml_wrong_shape(tmp_path):
    path = tmp_path / "rules.yml"
    path.write_text("rules:\n  - inputs: [a]\n    oops: 1\n")
    with pytest.raises(LoadError, match=r"rules\.yml:rules\.list: unknown keys"):
        load(path, Variables())


def test_variables_defaults_and_expansion():
    variables = Variables()
    assert variables.getvar("CFLAGS") == "-g"
    assert variables.getvar("UNSET") == ""
    variables.setvar("A", "$(B)!")
    variables.setvar("B", "b")
    assert variables.expand("$(A) $@ $< $$") == "b! $@ $< $$"
