import pytest

from engine.models import SENTINEL_ANSWER
from engine import resolver
from engine.resolver import resolve_answer, resolve_destination

PAGE = "https://site.example/quiz/abc"


# -------- answer ----------
def test_table_values_are_summed():
    answer, rule = resolve_answer({"table": [{"value": 3}, {"value": 4.5}]}, "")
    assert answer == 7.5
    assert rule == "sum_table"


def test_table_wins_over_sibling_answer():
    decoded = {"table": [{"value": 1}, {"value": 2}], "answer": "ignored"}
    assert resolve_answer(decoded, "100 200")[0] == 3


def test_table_coerces_missing_and_non_numeric_values_to_zero():
    decoded = {"table": [
        {"value": 5},
        {"value": "7"},
        {"value": "2.5"},
        {"value": "seven"},
        {"value": None},
        {"value": True},
        {"value": [1]},
        {},
        "not a row",
        None,
    ]}
    assert resolve_answer(decoded, "")[0] == 14.5


def test_empty_table_sums_to_zero():
    assert resolve_answer({"table": []}, "12 34") == (0, "sum_table")


def test_non_list_table_is_not_usable():
    assert resolve_answer({"table": "3,4", "answer": "blue"}, "")[0] == "blue"


@pytest.mark.parametrize("value", ["blue", 42, 1.5, None, False, [1, 2], {"k": "v"}])
def test_answer_field_is_copied_verbatim(value):
    answer, rule = resolve_answer({"answer": value}, "99 bottles")
    assert rule == "direct_answer"
    assert answer == value
    assert type(answer) is type(value)


def test_numbers_in_page_text_are_summed():
    assert resolve_answer(None, "Total: 12 items, 3 pending") == (15, "sum_numbers_in_text")


def test_signed_and_fractional_numbers():
    assert resolve_answer(None, "a -2 b +3 c .5 d 1.25") == (2.75, "sum_numbers_in_text")


def test_payload_without_usable_fields_falls_through_to_text():
    assert resolve_answer({"something": "else"}, "4 and 6")[0] == 10


def test_sentinel_when_nothing_numeric():
    assert resolve_answer(None, "no digits anywhere") == (SENTINEL_ANSWER, "sentinel")
    assert resolve_answer({"other": 1}, "") == (SENTINEL_ANSWER, "sentinel")


# -------- destination ----------
def test_payload_submit_key_wins_and_markup_is_not_consulted():
    calls = []

    def spy(decoded, html, page_url):
        calls.append(page_url)
        return "https://should.not/win"

    html = '<form action="/form"></form><a id="submit" href="/link">go</a>'
    target = resolve_destination(
        {"submit": "https://other.example/submit"}, html, PAGE,
        sources=[resolver.payload_submit_target, spy, resolver.form_action],
    )
    assert target == "https://other.example/submit"
    assert calls == []


@pytest.mark.parametrize("decoded, expected", [
    ({"submit": "https://a.example/s", "url": "https://b.example", "endpoint": "/e"}, "https://a.example/s"),
    ({"url": "https://b.example/u", "endpoint": "/e"}, "https://b.example/u"),
    ({"submit": "", "endpoint": "/e"}, "https://site.example/e"),
    ({"submit": 5, "url": None, "endpoint": "https://c.example/e"}, "https://c.example/e"),
])
def test_payload_submit_key_order(decoded, expected):
    assert resolve_destination(decoded, "", PAGE) == expected


def test_relative_form_action_is_resolved_against_page_url():
    html = '<html><body><form action="/submit" method="post"></form></body></html>'
    assert resolve_destination(None, html, PAGE) == "https://site.example/submit"


def test_only_first_form_is_considered():
    html = '<form></form><form action="/second"></form><a id="submit" href="next">x</a>'
    assert resolve_destination(None, html, PAGE) == "https://site.example/quiz/next"


def test_submit_anchor_used_when_no_form():
    html = '<a href="/other">o</a><a id="submit" href="https://x.example/post">submit</a>'
    assert resolve_destination({"answer": 1}, html, PAGE) == "https://x.example/post"


def test_no_destination():
    assert resolve_destination(None, "<p>nothing</p>", PAGE) is None
    assert resolve_destination(None, "", PAGE) is None


# -------- oversized and non-finite numbers ----------
def test_digit_run_past_int_limit_is_skipped():
    assert resolve_answer(None, "id " + "1" * 5000) == (SENTINEL_ANSWER, "sentinel")
    assert resolve_answer(None, "id " + "1" * 5000 + " and 4") == (4, "sum_numbers_in_text")


def test_overflowing_fractional_match_is_skipped():
    assert resolve_answer(None, "9" * 400 + ".5 and 1") == (1, "sum_numbers_in_text")


def test_big_int_mixed_with_float_falls_through_to_sentinel():
    assert resolve_answer(None, "9" * 400 + " 0.5")[1] == "sentinel"


def test_infinite_table_values_count_as_zero():
    decoded = {"table": [{"value": float("inf")}, {"value": "-inf"}, {"value": float("nan")}, {"value": 2}]}
    assert resolve_answer(decoded, "") == (2, "sum_table")


def test_table_overflowing_when_added_is_not_usable():
    decoded = {"table": [{"value": 1.7e308}, {"value": 1.7e308}], "answer": "fallback"}
    assert resolve_answer(decoded, "") == ("fallback", "direct_answer")
