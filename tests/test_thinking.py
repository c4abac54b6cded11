import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import unittest

import pytest

from sitesmith.thinking import (
    strip_thinking, extract_json_object, parse_json_object, extract_html_document, new_thoughts,
)


SAMPLES = [
    "",
    "plain visible text",
    "<think>plan the hero</think>Hello",
    "<think>a</think>\n<!-- thinking: b -->\nThought: c\nvisible",
    "<think>outer <think>inner</think> tail</think>Body",
    "Hi <think>still going",
    "```html\n<p>x</p>\n```",
    "Reasoning: keep it short\n```json\n{\"a\": 1}\n```",
    "</think> stray close then text",
    "<!-- reasoning: one --><!-- reasoning: two -->done",
]


class TestStripThinking(unittest.TestCase):

    def test_think_block_removed(self):
        result = strip_thinking("<think>plan the hero</think>Hello")
        self.assertEqual(result.cleaned, "Hello")
        self.assertEqual(result.thoughts, ["plan the hero"])

    def test_removal_order_blocks_then_comments_then_lines(self):
        result = strip_thinking("<think>a</think>\n<!-- thinking: b -->\nThought: c\nvisible")
        self.assertEqual(result.thoughts, ["a", "b", "Thought: c"])
        self.assertEqual(result.cleaned, "visible")

    def test_nested_blocks_are_one_thought(self):
        result = strip_thinking("<think>outer <think>inner</think> tail</think>Body")
        self.assertEqual(result.cleaned, "Body")
        self.assertEqual(result.thoughts, ["outer inner tail"])

    def test_multiple_blocks_keep_first_seen_order(self):
        result = strip_thinking("<think>one</think>A<think>two</think>B")
        self.assertEqual(result.thoughts, ["one", "two"])
        self.assertEqual(result.cleaned, "AB")

    def test_unterminated_block_stays_visible(self):
        result = strip_thinking("Hi <think>still going")
        self.assertEqual(result.cleaned, "Hi <think>still going")
        self.assertEqual(result.thoughts, [])

    def test_empty_blocks_are_dropped(self):
        result = strip_thinking("<think>   </think>text")
        self.assertEqual(result.thoughts, [])
        self.assertEqual(result.cleaned, "text")

    def test_fences_are_unwrapped_not_deleted(self):
        result = strip_thinking("```html\n<p>x</p>\n```")
        self.assertEqual(result.cleaned, "<p>x</p>")

    def test_none_input(self):
        result = strip_thinking(None)
        self.assertEqual(result.cleaned, "")
        self.assertEqual(result.thoughts, [])


@pytest.mark.parametrize("text", SAMPLES)
def test_strip_thinking_is_idempotent(text):
    first = strip_thinking(text)
    second = strip_thinking(first.cleaned)
    assert second.thoughts == []
    assert second.cleaned == first.cleaned


def test_extract_json_object_from_prose():
    assert extract_json_object('some preamble {"a":1} trailing') == '{"a":1}'


def test_extract_json_object_valid_input_unchanged():
    text = '{"a": 1, "b": [1, 2]}'
    assert json.loads(extract_json_object(text)) == json.loads(text)
    assert extract_json_object("  " + text + "  ") == text


def test_extract_json_object_strips_reasoning_and_fences():
    raw = "<think>let me answer</think>```json\n{\"site_title\": \"Crumb\"}\n```"
    assert json.loads(extract_json_object(raw)) == {"site_title": "Crumb"}


def test_parse_json_object_rejects_non_objects():
    assert parse_json_object("I cannot do that") is None
    assert parse_json_object("[1, 2]") is None
    assert parse_json_object("") is None
    assert parse_json_object('ok {"a": {"b": 2}} done') == {"a": {"b": 2}}


def test_extract_html_document_trims_chatter():
    raw = "Sure! Here it is:\n<!DOCTYPE html><html><body></body></html>\nHope it helps"
    assert extract_html_document(raw) == "<!DOCTYPE html><html><body></body></html>"


def test_extract_html_document_without_document():
    assert extract_html_document("  <p>fragment</p> ") == "<p>fragment</p>"


def test_new_thoughts_diffs_by_exact_text():
    seen = set()
    assert new_thoughts(["a", "b"], seen) == ["a", "b"]
    assert new_thoughts(["a", "b", "c"], seen) == ["c"]
    assert new_thoughts(["a "], seen) == ["a "]
