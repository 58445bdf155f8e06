"""Recovery of JSON payloads from free-form LLM output.

Models often wrap JSON in markdown fences, add prose around it, or stop
mid-object when they hit the output token limit. `parse_llm_json` tries, in
order: the fence-stripped text as-is, the first ``{...}`` span, and finally a
bracket-balancing pass that closes whatever the model left open. It returns
``None`` when nothing parses; callers substitute their own defaults.
"""

import json
import logging
import re
from dataclasses import dataclass, field

_logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_CLOSERS = {"{": "}", "[": "]"}
_TRAILING_JUNK = " \t\r\n,:"


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers."""
    return _FENCE_RE.sub("", text).strip()


def parse_llm_json(text: str | None) -> object | None:
    """Parse JSON from LLM output, salvaging what it can."""
    if not text:
        return None
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None
    try:
        return json.loads(cleaned)
    except ValueError:
        pass

    match = _OBJECT_RE.search(cleaned)
    if match:
        try:
            return json.loads(match.group(0))
        except ValueError:
            pass

    repaired = balance_json(cleaned)
    if repaired is None:
        _logger.warning("Unable to recover JSON from LLM output: %.200s", cleaned)
    return repaired


def balance_json(text: str) -> object | None:
    """Close unbalanced brackets and parse the result.

    Returns the first complete top-level value when one exists. For a
    truncated value, closes the open string and brackets; if that does not
    parse, falls back to the most recent structurally complete prefix.
    """
    start = _first_bracket(text)
    if start is None:
        return None
    scanner = _BracketScanner()
    for index in range(start, len(text)):
        scanner.feed(text[index], index)
        if scanner.complete_at is not None:
            return _loads_or_none(text[start : scanner.complete_at + 1])
        if scanner.broken:
            break

    if not scanner.broken:
        candidate = text[start:]
        if scanner.in_string:
            candidate = _close_string(candidate, escaped=scanner.escaped)
        parsed = _loads_or_none(_close(candidate, scanner.stack))
        if parsed is not None:
            return parsed

    for cut, stack in reversed(scanner.checkpoints):
        parsed = _loads_or_none(_close(text[start:cut], stack))
        if parsed is not None:
            return parsed
    return None


@dataclass
class _BracketScanner:
    """Character-level scanner tracking string and bracket state."""

    stack: list[str] = field(default_factory=list)
    in_string: bool = False
    escaped: bool = False
    broken: bool = False
    complete_at: int | None = None
    # (cut index, open brackets at that point) for prefixes that end cleanly.
    checkpoints: list[tuple[int, list[str]]] = field(default_factory=list)

    def feed(self, char: str, index: int) -> None:
        if self.in_string:
            if self.escaped:
                self.escaped = False
            elif char == "\\":
                self.escaped = True
            elif char == '"':
                self.in_string = False
            return

        if char == '"':
            self.in_string = True
        elif char in _CLOSERS:
            self.stack.append(char)
        elif char in "}]":
            if not self.stack or _CLOSERS[self.stack[-1]] != char:
                self.broken = True
                return
            self.stack.pop()
            if not self.stack:
                self.complete_at = index
                return
            self.checkpoints.append((index + 1, list(self.stack)))
        elif char == "," and self.stack:
            self.checkpoints.append((index, list(self.stack)))


def _first_bracket(text: str) -> int | None:
    positions = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    return min(positions) if positions else None


def _close_string(candidate: str, *, escaped: bool) -> str:
    if escaped:
        candidate = candidate[:-1]
    return candidate + '"'


def _close(candidate: str, stack: list[str]) -> str:
    trimmed = candidate.rstrip(_TRAILING_JUNK)
    return trimmed + "".join(_CLOSERS[opener] for opener in reversed(stack))


def _loads_or_none(candidate: str) -> object | None:
    try:
        return json.loads(candidate)
    except ValueError:
        return None
