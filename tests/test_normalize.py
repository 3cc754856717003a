import json

import pytest

from vibemit.normalize import (
    OutputMode,
    clean_candidate,
    dedupe_candidates,
    normalize_response,
    parse_structured_response,
    strip_reasoning,
)

SINGLE = OutputMode.SINGLE_LINE
BODY = OutputMode.SUBJECT_BODY


# ---------------------------------------------------------------------------
# clean_candidate
# ---------------------------------------------------------------------------
def test_clean_trims_whitespace():
    assert clean_candidate("  Add new feature  ") == "Add new feature"


@pytest.mark.parametrize(
    "raw",
    ["1. x", "1) x", "1: x", "- x", "* x", "• x", "12. x", "3:x"],
)
def test_clean_strips_leading_markers(raw):
    assert clean_candidate(raw) == "x"


@pytest.mark.parametrize(
    "raw",
    ['"Add new feature"', "'Add new feature'", "`Add new feature`", "**Add new feature**"],
)
def test_clean_strips_wrapping_quotes_and_emphasis(raw):
    assert clean_candidate(raw) == "Add new feature"


def test_clean_handles_numbering_then_quotes_then_bold():
    assert clean_candidate('1. "Add new feature"') == "Add new feature"
    assert clean_candidate('- "**Fix bug**"') == "Fix bug"


def test_clean_removes_stray_reasoning_tags():
    assert clean_candidate("<think>Add feature") == "Add feature"
    assert clean_candidate("Add feature</think>") == "Add feature"
    assert clean_candidate("</THINK>Add feature") == "Add feature"


def test_clean_returns_empty_for_blank_input():
    assert clean_candidate("") == ""
    assert clean_candidate("   ") == ""
    assert clean_candidate('""') == ""
    assert clean_candidate("- ") == ""


def test_clean_keeps_commentary_and_conventional_format():
    assert clean_candidate("Here are three commit messages") == (
        "Here are three commit messages"
    )
    assert clean_candidate("feat(auth): add login endpoint") == (
        "feat(auth): add login endpoint"
    )


@pytest.mark.parametrize(
    "clean",
    ["Add new feature", "feat(api): add endpoint", "Fix off-by-one in parser"],
)
def test_clean_is_idempotent_on_clean_text(clean):
    assert clean_candidate(clean) == clean
    assert normalize_response(clean, SINGLE) == [clean]


# ---------------------------------------------------------------------------
# reasoning blocks
# ---------------------------------------------------------------------------
def test_strip_reasoning_removes_multiline_blocks_case_insensitively():
    text = "<Think>\nline 1\nline 2\n</THINK>\nAdd feature"
    assert strip_reasoning(text).strip() == "Add feature"


def test_reasoning_block_followed_by_content():
    raw = "<think>\nI should write messages.\n</think>\nAdd feature\nFix bug\nUpdate docs"
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug", "Update docs"]


def test_only_reasoning_block_yields_nothing():
    assert normalize_response("<think>\nThinking about this...\n</think>", SINGLE) == []
    assert normalize_response("<think>x</think>\n\n  ", BODY) == []


# ---------------------------------------------------------------------------
# structured output
# ---------------------------------------------------------------------------
def test_structured_object_dedupes_preserving_order():
    raw = json.dumps({"messages": ["a", "a", "b"]})
    assert normalize_response(raw, SINGLE) == ["a", "b"]


def test_structured_array():
    raw = json.dumps(["Add feature", "Fix bug", "Refactor code"])
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug", "Refactor code"]


def test_structured_more_than_three_keeps_first_three_unique():
    raw = json.dumps({"messages": ["One", "one", "Two", "Three", "Four"]})
    assert normalize_response(raw, SINGLE) == ["One", "Two", "Three"]


def test_structured_drops_non_strings():
    raw = json.dumps({"messages": ["Add feature", 3, None, {"x": 1}, "Fix bug"]})
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug"]


def test_structured_other_key_holding_strings():
    raw = json.dumps({"commits": ["Add feature", "Fix bug"]})
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug"]


def test_fenced_json_with_commentary():
    raw = (
        "Sure! Here you go:\n"
        "```json\n"
        '{"messages": ["Add feature", "Fix bug", "Update docs"]}\n'
        "```\n"
        "Let me know if you need more."
    )
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug", "Update docs"]


def test_fenced_block_without_tag():
    raw = '```\n["Add feature", "Fix bug"]\n```'
    assert parse_structured_response(raw) == ["Add feature", "Fix bug"]


def test_structured_entries_are_cleaned():
    raw = json.dumps({"messages": ["1. \"Add feature\"", "  ", "**Fix bug**"]})
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug"]


def test_structured_keeps_chatty_entries_for_the_filter():
    raw = json.dumps(
        {
            "messages": [
                "I've created the following files for your project:",
                "Add feature",
                "Fix bug",
                "Refactor code",
            ]
        }
    )
    assert normalize_response(raw, SINGLE) == [
        "I've created the following files for your project:",
        "Add feature",
        "Fix bug",
    ]


def test_structured_body_messages_keep_newlines():
    raw = json.dumps({"messages": ["Add auth\n\n- add login", "Fix bug\n\n- guard null"]})
    assert normalize_response(raw, BODY) == [
        "Add auth\n\n- add login",
        "Fix bug\n\n- guard null",
    ]


def test_json_scalar_is_not_structured():
    assert parse_structured_response("42") is None
    assert normalize_response("42", SINGLE) == ["42"]


def test_invalid_json_falls_back_to_lines():
    raw = '{"messages": ["Add feature", \nFix bug'
    assert parse_structured_response(raw) is None
    assert normalize_response("Add feature\nFix bug", SINGLE) == ["Add feature", "Fix bug"]


# ---------------------------------------------------------------------------
# unstructured splitting
# ---------------------------------------------------------------------------
def test_single_line_split_and_cap():
    assert normalize_response("One\nTwo\nThree\nFour\nFive", SINGLE) == [
        "One",
        "Two",
        "Three",
    ]


def test_single_line_dedup_case_insensitive():
    raw = "Add feature\nadd feature\nADD FEATURE\nFix bug"
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug"]


def test_single_line_numbered_and_blank_lines():
    raw = "1. Add feature\n\n\n2. Fix bug\r\n\r\n3) Refactor code"
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug", "Refactor code"]


def test_commentary_lines_are_not_filtered_here():
    raw = "Here are three commit messages:\nAdd feature\nFix bug\nRefactor code"
    assert normalize_response(raw, SINGLE) == [
        "Here are three commit messages:",
        "Add feature",
        "Fix bug",
    ]


def test_body_mode_splits_on_blank_line_runs():
    raw = "Subject A\n\n- detail\n\n\n\nSubject B\n\n- detail"
    result = normalize_response(raw, BODY)
    assert len(result) == 2
    assert result[0].startswith("Subject A")
    assert result[1].startswith("Subject B")
    for candidate in result:
        assert any(line.strip() for line in candidate.split("\n")[1:])


def test_body_mode_strips_reasoning_then_splits():
    raw = "\n".join(
        [
            "<think>Let me generate messages</think>",
            "Add feature",
            "",
            "- Detail one",
            "",
            "",
            "",
            "Fix bug",
            "",
            "- Detail two",
        ]
    )
    result = normalize_response(raw, BODY)
    assert len(result) == 2
    assert "Add feature" in result[0]
    assert "Fix bug" in result[1]


def test_body_mode_caps_at_three():
    raw = "\n\n\n\n".join(f"Message {i}\n\n- Detail" for i in range(1, 6))
    assert len(normalize_response(raw, BODY)) == 3


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "   ",
        "\n\n\n",
        "```",
        "<think>",
        "a\nA\na\nb\nB\nc\nC\nd",
        '{"messages": ["x", "X", "y", "Y", "z", "Z", "w"]}',
    ],
)
def test_normalize_always_returns_at_most_three_distinct(raw):
    for mode in (SINGLE, BODY):
        result = normalize_response(raw, mode)
        assert len(result) <= 3
        assert len({r.lower() for r in result}) == len(result)
        assert all(r for r in result)


def test_dedupe_keeps_first_seen_casing():
    assert dedupe_candidates(["Fix Bug", "fix bug", "Other"]) == ["Fix Bug", "Other"]


def test_structured_skips_lists_without_strings():
    raw = json.dumps({"scores": [1, 2], "commits": ["Add feature", "Fix bug"]})
    assert parse_structured_response(raw) == ["Add feature", "Fix bug"]
    assert normalize_response(raw, SINGLE) == ["Add feature", "Fix bug"]


def test_object_without_string_list_is_not_structured():
    assert parse_structured_response(json.dumps({"scores": [1, 2], "ok": True})) is None
