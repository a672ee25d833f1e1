"""Parsing of the generator's newline-delimited JSON stream."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Increment:
    """One parsed stream object: a text fragment and the end-of-stream flag."""

    content: str = ""
    done: bool = False


def parse_line(line: str | bytes) -> Increment | None:
    """Parse one NDJSON line; returns None for blank or malformed lines."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = line.strip()
    if not line:
        return None
    try:
        obj: Any = json.loads(line)
    except json.JSONDecodeError:
        logger.debug("skipping malformed stream line: %.80r", line)
        return None
    if not isinstance(obj, dict):
        logger.debug("skipping non-object stream line: %.80r", line)
        return None

    content = ""
    message = obj.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        content = message["content"]
    return Increment(content=content, done=bool(obj.get("done", False)))


def parse_increments(lines: Iterable[str | bytes]) -> Iterator[Increment]:
    """Lazily parse a stream, stopping after the first ``done`` object."""
    for line in lines:
        increment = parse_line(line)
        if increment is None:
            continue
        yield increment
        if increment.done:
            return
