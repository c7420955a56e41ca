"""
Tests for the command line tokenizer.
"""

from __future__ import annotations

import pytest

from wsh_cli.parser import (
    OPERATOR_SCAN_ORDER,
    Redirection,
    RedirectionSyntaxError,
    RedirectType,
    classify_operator,
    find_operator,
    parse_line,
)

VARS = {"GREETING": "hi", "EMPTY": "", "TRICKY": ">out.txt"}


def resolve(name: str) -> str:
    return VARS.get(name, "")


# ----------------------------------------------------------------
# Plain tokens and substitution
# ----------------------------------------------------------------


def test_splits_on_whitespace():
    cmd = parse_line("ls   -l \t /tmp", resolve)

    assert cmd.args == ["ls", "-l", "/tmp"]
    assert cmd.redirection == Redirection()
    assert cmd.redirection.active is False


def test_variable_tokens_are_substituted():
    cmd = parse_line("echo $GREETING world", resolve)

    assert cmd.args == ["echo", "hi", "world"]


def test_unset_variable_becomes_empty_argument():
    cmd = parse_line("echo $MISSING end", resolve)

    assert cmd.args == ["echo", "", "end"]


def test_substituted_value_is_not_rescanned():
    cmd = parse_line("echo $TRICKY", resolve)

    assert cmd.args == ["echo", ">out.txt"]
    assert cmd.redirection.type is RedirectType.NONE


def test_dollar_inside_token_is_literal():
    cmd = parse_line("echo a$GREETING", resolve)

    assert cmd.args == ["echo", "a$GREETING"]


def test_empty_line_has_no_name():
    cmd = parse_line("", resolve)

    assert cmd.args == []
    assert cmd.name is None


# ----------------------------------------------------------------
# Redirection extraction
# ----------------------------------------------------------------


@pytest.mark.parametrize(
    "token, kind, descriptor",
    [
        (">out.txt", RedirectType.OUTPUT, 1),
        (">>out.txt", RedirectType.OUTPUT_APPEND, 1),
        ("<out.txt", RedirectType.INPUT, 0),
        ("&>out.txt", RedirectType.OUTPUT_ERR, 1),
        ("&>>out.txt", RedirectType.OUTPUT_ERR_APPEND, 1),
        ("2>out.txt", RedirectType.OUTPUT, 2),
        ("2>>out.txt", RedirectType.OUTPUT_APPEND, 2),
        ("3<out.txt", RedirectType.INPUT, 3),
    ],
)
def test_attached_redirections(token: str, kind: RedirectType, descriptor: int):
    cmd = parse_line(f"cmd arg {token}", resolve)

    assert cmd.args == ["cmd", "arg"]
    assert cmd.redirection == Redirection(kind, descriptor, "out.txt")
    assert cmd.redirection.active is True


def test_operator_with_separate_target():
    cmd = parse_line("echo hi > out.txt", resolve)

    assert cmd.args == ["echo", "hi"]
    assert cmd.redirection == Redirection(RedirectType.OUTPUT, 1, "out.txt")


def test_redirection_may_precede_arguments():
    cmd = parse_line("cat <in.txt -n", resolve)

    assert cmd.args == ["cat", "-n"]
    assert cmd.redirection.target == "in.txt"


def test_last_redirection_wins():
    cmd = parse_line("cmd >a.txt 2>>b.txt", resolve)

    assert cmd.redirection == Redirection(
        RedirectType.OUTPUT_APPEND, 2, "b.txt"
    )


@pytest.mark.parametrize("line", ["echo hi >", "cat <", "cmd 2>>", "cmd &>"])
def test_missing_target_is_syntax_error(line: str):
    with pytest.raises(RedirectionSyntaxError) as excinfo:
        parse_line(line, resolve)

    assert "syntax error" in str(excinfo.value)
    assert excinfo.value.token == line.split()[-1]


def test_operator_not_at_token_head_is_dropped():
    cmd = parse_line("echo a>b", resolve)

    assert cmd.args == ["echo"]
    assert "a>b" not in cmd.args
    assert cmd.redirection.active is False


def test_operator_not_at_token_head_cancels_earlier_clause():
    cmd = parse_line("cmd >out.txt x<y", resolve)

    assert cmd.args == ["cmd"]
    assert cmd.redirection == Redirection()


def test_operator_not_at_token_head_without_target_is_syntax_error():
    with pytest.raises(RedirectionSyntaxError):
        parse_line("cmd a>", resolve)


def test_only_redirection_yields_no_arguments():
    cmd = parse_line(">out.txt", resolve)

    assert cmd.args == []
    assert cmd.redirection.target == "out.txt"


# ----------------------------------------------------------------
# Operator scan and classification
# ----------------------------------------------------------------


def test_default_scan_order_checks_plain_forms_first():
    assert OPERATOR_SCAN_ORDER == (">>", ">", "&>>", "&>", "<")
    # '>' is found inside '&>' before '&>' itself is tried
    assert find_operator("&>file") == (">", 1)
    assert find_operator("&>>file") == (">>", 1)
    assert find_operator("plain") is None


def test_classification_reads_token_head():
    assert classify_operator("&>>x") == (RedirectType.OUTPUT_ERR_APPEND, None)
    assert classify_operator("&>x") == (RedirectType.OUTPUT_ERR, None)
    assert classify_operator("12>x") == (RedirectType.OUTPUT, 12)
    assert classify_operator("x>y") == (RedirectType.NONE, None)


def test_custom_scan_order_gives_same_targets():
    longest_first = ("&>>", "&>", ">>", ">", "<")

    cmd = parse_line("cmd &>>log.txt", resolve, scan_order=longest_first)

    assert cmd.redirection == Redirection(
        RedirectType.OUTPUT_ERR_APPEND, 1, "log.txt"
    )
