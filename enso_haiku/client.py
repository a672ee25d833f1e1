"""Generator client protocol, the Ollama client and a mock implementation."""
from __future__ import annotations

import json
import random as _random_mod
import time
import urllib.error
import urllib.request
from typing import Callable, Iterable, Iterator, Protocol, Sequence, runtime_checkable

from enso_haiku.parsers import Increment, parse_increments
from enso_haiku.types import ErrorKind, GenerationError

HAIKU_PROMPT = (
    "Write a simple haiku about emptiness (sunyata) in English. A haiku is a "
    "three-line poem with 5 syllables in the first line, 7 syllables in the "
    "second line, and 5 syllables in the third line. Keep it very simple and "
    "minimal. Focus on emptiness, void, nothingness, space, silence, or "
    "absence. Use simple, everyday words. Avoid complex imagery or metaphors. "
    "Return only the three lines of the haiku, one line per line, no extra "
    "text or explanation."
)


@runtime_checkable
class GeneratorClient(Protocol):
    """Protocol for streaming text generators.

    ``stream`` opens the connection before returning, so connection and
    status failures raise ``GenerationError`` from the call itself; the
    returned iterator yields raw NDJSON lines and may block between lines.
    """

    def stream(self, prompt: str) -> Iterator[str | bytes]:
        ...


def _iter_response(resp) -> Iterator[bytes]:
    with resp:
        try:
            for raw in resp:
                yield raw
        except TimeoutError as exc:
            raise GenerationError(ErrorKind.TIMEOUT, f"stream read timed out: {exc}") from exc
        except OSError as exc:
            raise GenerationError(ErrorKind.CONNECTIVITY, f"stream interrupted: {exc}") from exc


class OllamaClient:
    """Streaming client for Ollama's ``/api/chat`` endpoint (stdlib urllib)."""

    def __init__(
        self,
        model: str = "llama3.2",
        base_url: str = "http://localhost:11434",
        timeout: float = 30.0,
    ) -> None:
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def stream(self, prompt: str) -> Iterator[bytes]:
        """POST a streaming chat request and return its response lines."""
        payload = json.dumps({
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": True,
        }).encode("utf-8")

        req = urllib.request.Request(
            f"{self._base_url}/api/chat",
            data=payload,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            resp = urllib.request.urlopen(req, timeout=self._timeout)
        except urllib.error.HTTPError as exc:
            exc.close()
            raise GenerationError(
                ErrorKind.STATUS, f"Ollama API error: {exc.code}", status=exc.code
            ) from exc
        except urllib.error.URLError as exc:
            raise GenerationError(
                ErrorKind.CONNECTIVITY, f"cannot reach {self._base_url}: {exc.reason}"
            ) from exc
        except TimeoutError as exc:
            raise GenerationError(
                ErrorKind.TIMEOUT, f"connection to {self._base_url} timed out"
            ) from exc
        except OSError as exc:
            raise GenerationError(
                ErrorKind.CONNECTIVITY, f"cannot reach {self._base_url}: {exc}"
            ) from exc
        return _iter_response(resp)


class IncrementStream:
    """Lazy, restartable sequence of parsed increments for one prompt.

    Each ``iter()`` opens a fresh client stream, so the connection is
    established (or fails) when iteration starts.
    """

    def __init__(self, client: GeneratorClient, prompt: str = HAIKU_PROMPT) -> None:
        self._client = client
        self._prompt = prompt

    def __iter__(self) -> Iterator[Increment]:
        return parse_increments(self._client.stream(self._prompt))


def ndjson_lines(fragments: Iterable[str], done: bool = True) -> list[str]:
    """Encode text fragments the way Ollama streams them."""
    lines = [
        json.dumps({"message": {"role": "assistant", "content": f}, "done": False})
        for f in fragments
    ]
    if done:
        lines.append(json.dumps({"message": {"role": "assistant", "content": ""}, "done": True}))
    return lines


class MockClient:
    """Deterministic generator client for testing.

    Conforms to the GeneratorClient protocol. Supports scripted response
    lines, latency simulation, and error injection.

    Args:
        lines: Raw NDJSON lines to stream, OR a callable prompt -> lines.
        latency: Simulated delay in seconds before each line (default 0.0).
        error_rate: Probability of raising ``error`` on open (0.0--1.0).
        error: The exception raised on simulated failure. Defaults to a
            connectivity ``GenerationError``.
    """

    def __init__(
        self,
        lines: Sequence[str] | Callable[[str], Sequence[str]],
        latency: float = 0.0,
        error_rate: float = 0.0,
        error: BaseException | None = None,
    ) -> None:
        self._lines = lines
        self._latency = latency
        self._error_rate = error_rate
        self._error = (
            error
            if error is not None
            else GenerationError(ErrorKind.CONNECTIVITY, "mock connection refused")
        )
        self._rng = _random_mod.Random()
        self.calls: list[str] = []

    @classmethod
    def from_fragments(cls, fragments: Iterable[str], **kwargs) -> MockClient:
        return cls(ndjson_lines(fragments), **kwargs)

    def stream(self, prompt: str) -> Iterator[str]:
        self.calls.append(prompt)
        if self._error_rate > 0.0 and self._rng.random() < self._error_rate:
            raise self._error
        lines = self._lines(prompt) if callable(self._lines) else self._lines
        return self._emit(list(lines))

    def _emit(self, lines: list[str]) -> Iterator[str]:
        for line in lines:
            if self._latency > 0.0:
                time.sleep(self._latency)
            yield line
