"""
Reasoning extraction for raw model output.
==========================================
Separates visible output from embedded reasoning ("thinking") and unwraps
code fences. Also hosts the defensive JSON/HTML extractors used on every
model response.
"""
import json
import re
from dataclasses import dataclass, field
from typing import List, Optional, Set, Dict, Any

_THINK_TAG = re.compile(r"<(/?)think\s*>", re.IGNORECASE)
_THINK_COMMENT = re.compile(
    r"<!--\s*(?:thinking|think|thought|reasoning)\b:?\s*([\s\S]*?)-->",
    re.IGNORECASE,
)
_THOUGHT_LINE = re.compile(
    r"(?:^|\n)\s*(Thought|Thinking|Reasoning)\s*:(.*)(?=\n|$)",
    re.IGNORECASE,
)
_FENCE = re.compile(r"```[\w+-]*[ \t]*\n?([\s\S]*?)```")


@dataclass
class ThinkingExtraction:
    cleaned: str
    thoughts: List[str] = field(default_factory=list)


def _collect(thoughts: List[str], text: str):
    trimmed = text.strip()
    if trimmed:
        thoughts.append(trimmed)


def _remove_think_blocks(text: str, thoughts: List[str]) -> str:
    """
    Removes <think>...</think> blocks, outermost first.

    Nested blocks are collected as one thought with inner markers removed.
    Stray closing tags are left alone, and an unterminated block stays
    visible until its closing tag arrives.
    """
    out = []
    depth = 0
    cursor = 0
    block_start = 0
    for match in _THINK_TAG.finditer(text):
        closing = match.group(1) == "/"
        if not closing:
            if depth == 0:
                out.append(text[cursor:match.start()])
                block_start = match.start()
            depth += 1
        elif depth > 0:
            depth -= 1
            if depth == 0:
                inner = text[block_start:match.end()]
                _collect(thoughts, _THINK_TAG.sub("", inner))
                cursor = match.end()
    if depth > 0:
        out.append(text[block_start:])
    else:
        out.append(text[cursor:])
    return "".join(out)


def _remove_think_comments(text: str, thoughts: List[str]) -> str:
    def _replace(match):
        _collect(thoughts, match.group(1))
        return ""
    return _THINK_COMMENT.sub(_replace, text)


def _remove_thought_lines(text: str, thoughts: List[str]) -> str:
    def _replace(match):
        _collect(thoughts, f"{match.group(1)}: {match.group(2).strip()}")
        return ""
    return _THOUGHT_LINE.sub(_replace, text)


def _unwrap_fences(text: str) -> str:
    return _FENCE.sub(lambda m: f"{m.group(1)}\n", text)


def strip_thinking(text: Optional[str]) -> ThinkingExtraction:
    """
    Splits raw model text into visible output and reasoning.

    Removal order is: <think> blocks, then think comments, then
    Thought:/Thinking:/Reasoning: lines. Fenced code is unwrapped afterwards.
    The passes repeat until the text stops changing, so extracting from an
    already-cleaned string is a no-op.
    """
    thoughts: List[str] = []
    working = text or ""
    while True:
        before = working
        working = _remove_think_blocks(working, thoughts)
        working = _remove_think_comments(working, thoughts)
        working = _remove_thought_lines(working, thoughts)
        working = _unwrap_fences(working)
        if working == before:
            break
    return ThinkingExtraction(cleaned=working.strip(), thoughts=thoughts)


def extract_json_object(text: Optional[str]) -> str:
    """
    Returns the JSON object text inside a model response.

    Reasoning and fences are stripped first. If the remainder does not
    parse, the outermost {...} span is tried. When nothing parses the
    cleaned text is returned unchanged for the caller to reject.
    """
    cleaned = strip_thinking(text).cleaned.strip()
    no_ticks = re.sub(r"^```(?:json)?", "", cleaned, flags=re.IGNORECASE)
    no_ticks = re.sub(r"```$", "", no_ticks).strip()
    try:
        json.loads(no_ticks)
        return no_ticks
    except json.JSONDecodeError:
        pass

    first = no_ticks.find("{")
    last = no_ticks.rfind("}")
    if first != -1 and last > first:
        candidate = no_ticks[first:last + 1]
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError:
            pass
    return no_ticks


def parse_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parses a model response into a dict, or None when it is not a JSON object."""
    if not text or not text.strip():
        return None
    try:
        data = json.loads(extract_json_object(text), strict=False)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def extract_html_document(text: Optional[str]) -> str:
    """
    Trims chatter around an HTML document.

    Starts at <!DOCTYPE html> (or <html>) and ends at the last </html>.
    Text without a recognisable document is returned stripped.
    """
    candidate = strip_thinking(text).cleaned
    if not candidate:
        return ""
    lowered = candidate.lower()
    start = lowered.find("<!doctype html")
    if start == -1:
        start = lowered.find("<html")
    if start == -1:
        return candidate.strip()
    end = lowered.rfind("</html>")
    if end != -1 and end > start:
        return candidate[start:end + len("</html>")].strip()
    return candidate[start:].strip()


def new_thoughts(thoughts: List[str], seen: Set[str]) -> List[str]:
    """Returns thoughts not yet in `seen` (exact match), in order, and records them."""
    fresh = []
    for thought in thoughts:
        if thought not in seen:
            seen.add(thought)
            fresh.append(thought)
    return fresh
