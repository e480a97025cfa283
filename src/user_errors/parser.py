# src/user_errors/parser.py
"""
Parser for user-error messages raised by database routines.

Once the configured prefix has been removed, a user-error message looks like:

    "translation.key"|name:value|other:"quoted | value"

- The key comes first. It is either a quoted token or everything up to the first `|`.
- Each parameter is a `name:value` pair introduced by `|`. Names follow the identifier
  rules `[a-zA-Z_][a-zA-Z0-9_]*`; values are quoted tokens or runs up to the next `|`.
- Inside a quoted token a literal `"` is written twice, like in SQL.

Parameters are returned keyed by their `%name%` placeholder so the result can be
handed to a translator as-is.

Parsing is done in two passes:
  1. Match the whole message: a key followed by a tail made only of parameter
     segments. Alternatives are retried like a backtracking matcher would (a quoted
     token that leaves garbage behind is retried as a plain run). When nothing fits,
     the raw input becomes the key and there are no parameters.
  2. Rescan the tail left to right and pull out every `| name : value` segment.

The parser never raises and keeps no state; a single instance may be shared freely.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

# Whitespace the grammar skips around delimiters (ASCII only).
_WHITESPACE = " \t\n\r\f\v"

# Characters stripped from the key and from every value.
_TRIM_CHARS = " \t\n\r\0\x0b"

_QUOTE = '"'
_ESCAPED_QUOTE = '""'
_PIPE = "|"
_NAME_SEPARATOR = ":"

_NAME_START = frozenset(string.ascii_letters + "_")
_NAME_CHARS = _NAME_START | frozenset(string.digits)


@dataclass(frozen=True)
class ParsedMessage:
    """
    Result of parsing a user-error message.

    - key: translation key, trimmed and unquoted.
    - parameters: read-only mapping of `%name%` placeholders to their values, in the
      order the names first appeared in the message.
    """

    key: str
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # freeze whatever mapping we were given
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))


# -----------------------
# Scanning helpers
# -----------------------

def _skip_whitespace(text: str, pos: int) -> int:
    end = len(text)
    while pos < end and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def _quoted_ends(text: str, pos: int) -> list[int]:
    """
    Return every position where a quoted token starting at `pos` may end, longest first.

    The content between the quotes is a non-empty sequence of non-quote characters and
    doubled quotes. Every quote reached after some content can close the token; when
    it is immediately followed by another quote the pair may also be read as an
    escaped quote and scanning goes on.
    """
    end = len(text)
    if pos >= end or text[pos] != _QUOTE:
        return []

    ends: list[int] = []
    i = pos + 1
    while i < end:
        if text[i] != _QUOTE:
            i += 1
            continue
        if i > pos + 1:
            ends.append(i + 1)
        if i + 1 < end and text[i + 1] == _QUOTE:
            i += 2
        else:
            break

    ends.reverse()
    return ends


def _unquoted_end(text: str, pos: int) -> int | None:
    """End of the non-empty run of non-pipe characters starting at `pos`."""
    end = text.find(_PIPE, pos)
    if end == -1:
        end = len(text)
    return end if end > pos else None


def _value_ends(text: str, pos: int) -> list[int]:
    ends = _quoted_ends(text, pos)
    unquoted = _unquoted_end(text, pos)
    if unquoted is not None:
        ends.append(unquoted)
    return ends


def _segment_head(text: str, pos: int) -> tuple[int, int, int] | None:
    """
    Read the `ws* | ws* name :` part of a parameter segment starting at `pos`.

    Returns (name_start, name_end, value_start) or None when there is no segment here.
    """
    end = len(text)
    i = _skip_whitespace(text, pos)
    if i >= end or text[i] != _PIPE:
        return None

    i = _skip_whitespace(text, i + 1)
    if i >= end or text[i] not in _NAME_START:
        return None

    name_start = i
    i += 1
    while i < end and text[i] in _NAME_CHARS:
        i += 1

    if i >= end or text[i] != _NAME_SEPARATOR:
        return None
    return name_start, i, i + 1


def _tail_matches(text: str, pos: int, failed: set[int]) -> bool:
    """
    Whether `text[pos:]` is made only of parameter segments (or is empty).

    `failed` collects positions already known not to lead to a full match; it can be
    shared between calls on the same text.
    """
    pending = [pos]
    while pending:
        current = pending.pop()
        if current == len(text):
            return True
        if current in failed:
            continue
        failed.add(current)

        head = _segment_head(text, current)
        if head is not None:
            pending.extend(_value_ends(text, head[2]))
    return False


def _match_message(text: str) -> tuple[str, str] | None:
    """Split `text` into (raw key, parameter tail), or None when the grammar does not fit."""
    failed: set[int] = set()

    start = _skip_whitespace(text, 0)
    for end in _quoted_ends(text, start):
        if _tail_matches(text, end, failed):
            return text[start:end], text[end:]

    # leading whitespace is part of the run; it is trimmed afterwards
    end = _unquoted_end(text, 0)
    if end is not None and _tail_matches(text, end, failed):
        return text[:end], text[end:]

    return None


def _scan_parameters(tail: str) -> list[tuple[str, str]]:
    """
    Extract every `| name : value` segment of `tail`, in order.

    Positions that do not start a segment are skipped, so a quoted value followed by
    stray text keeps only its quoted part.
    """
    found: list[tuple[str, str]] = []
    pos = 0
    while pos < len(tail):
        head = _segment_head(tail, pos)
        if head is None:
            pos += 1
            continue

        name_start, name_end, value_start = head
        quoted = _quoted_ends(tail, value_start)
        value_end = quoted[0] if quoted else _unquoted_end(tail, value_start)
        if value_end is None:
            pos += 1
            continue

        found.append((tail[name_start:name_end], tail[value_start:value_end]))
        pos = _skip_whitespace(tail, value_end)
    return found


def _normalize(token: str) -> str:
    """Trim a key/value and unwrap it when quoted (`""` -> `"`)."""
    token = token.strip(_TRIM_CHARS)
    if token.startswith(_QUOTE):
        token = token[1:-1].replace(_ESCAPED_QUOTE, _QUOTE)
    return token


# -----------------------
# Public API
# -----------------------

class MessageParser:
    """Turns a prefix-stripped user-error message into a ParsedMessage."""

    def parse(self, text: str) -> ParsedMessage:
        match = _match_message(text)
        if match is None:
            # not our format: hand the whole message over untouched
            return ParsedMessage(text)

        raw_key, tail = match
        parameters: dict[str, str] = {}
        if tail and _PIPE in tail:
            for name, value in _scan_parameters(tail):
                parameters[f"%{name}%"] = _normalize(value)

        return ParsedMessage(_normalize(raw_key), parameters)


_default_parser = MessageParser()


def parse_message(text: str) -> ParsedMessage:
    """Parse `text` with a shared MessageParser."""
    return _default_parser.parse(text)


__all__ = ["ParsedMessage", "MessageParser", "parse_message"]
