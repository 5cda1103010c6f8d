"""Tokenizer for nasher.cfg files.

The format is INI-like:

    [Target]
    name = "default"
    source = "src/*.nss"
    source = src/*.json   # unquoted values run up to a comment

Repeated keys are legal; interpretation (overwrite or accumulate) is up to
the loader. This module only turns text into a stream of events.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SECTION_RE = re.compile(r"^\[\s*(?P<section>[^\]]*?)\s*\]\s*(?:[#;].*)?$")
KEY_RE = re.compile(r"^(?P<key>[A-Za-z0-9_.\-]+)\s*(?:(?P<sep>[=:])\s*(?P<rest>.*))?$")

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}


class ConfigError(Exception):
    """Raised when a config file cannot be read or interpreted."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        line: int | None = None,
        code: str = "config_error",
    ) -> None:
        super().__init__(message)
        self.path = path
        self.line = line
        self.code = code


@dataclass(frozen=True)
class SectionStart:
    """A ``[Section]`` header."""

    section: str
    line: int


@dataclass(frozen=True)
class KeyValue:
    """A ``key = value`` pair."""

    key: str
    value: str
    line: int


Event = SectionStart | KeyValue


def _parse_quoted(text: str, path: str, lineno: int) -> tuple[str, str]:
    """Parse a double-quoted string at the start of text.

    Returns:
        Tuple of (unescaped value, remainder after the closing quote).
    """
    out: list[str] = []
    i = 1
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            out.append(ESCAPES.get(nxt, "\\" + nxt))
            i += 2
            continue
        if ch == '"':
            return "".join(out), text[i + 1 :]
        out.append(ch)
        i += 1
    raise ConfigError(f"{path}({lineno}): unterminated string", path=path, line=lineno)


def _parse_value(rest: str, path: str, lineno: int) -> str:
    """Parse the right-hand side of a key/value line."""
    rest = rest.strip()
    if rest.startswith('"'):
        value, tail = _parse_quoted(rest, path, lineno)
        tail = tail.strip()
        if tail and tail[0] not in "#;":
            raise ConfigError(
                f"{path}({lineno}): unexpected text after string: {tail}",
                path=path,
                line=lineno,
            )
        return value
    # Unquoted values end at the first comment marker
    return re.split(r"\s[#;]", " " + rest, maxsplit=1)[0].strip()


def iter_events(text: str, path: str = "<string>") -> Iterator[Event]:
    """Yield section and key/value events for config text.

    Args:
        text: Full file contents.
        path: File name used in error messages.

    Yields:
        SectionStart and KeyValue events in file order.

    Raises:
        ConfigError: If a line is not a comment, section or key/value pair.
    """
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line[0] in "#;":
            continue

        if line.startswith("["):
            match = SECTION_RE.match(line)
            if not match or not match.group("section"):
                raise ConfigError(
                    f"{path}({lineno}): invalid section header: {line}",
                    path=path,
                    line=lineno,
                )
            yield SectionStart(match.group("section"), lineno)
            continue

        match = KEY_RE.match(line)
        if not match:
            raise ConfigError(
                f"{path}({lineno}): expected key/value pair, got: {line}",
                path=path,
                line=lineno,
            )
        rest = match.group("rest")
        value = _parse_value(rest, path, lineno) if rest is not None else ""
        yield KeyValue(match.group("key"), value, lineno)


def format_pair(key: str, value: str) -> str:
    """Render a key/value line the way generated config files write them."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'{key} = "{escaped}"'


__all__ = [
    "ConfigError",
    "Event",
    "KeyValue",
    "SectionStart",
    "format_pair",
    "iter_events",
]
