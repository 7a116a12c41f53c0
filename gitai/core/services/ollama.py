"""
Ollama client — talks to the local model server over its HTTP API.

Only the two endpoints gitai needs:
    POST /api/generate   one-shot, non-streaming completion
    GET  /api/tags       installed models
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any

from gitai import __version__

logger = logging.getLogger(__name__)


class OllamaError(Exception):
    """Base error for Ollama requests."""


class OllamaConnectionError(OllamaError):
    """The server could not be reached."""


class ModelNotFoundError(OllamaError):
    """The requested model is not pulled on the server."""


class OllamaClient:
    """Minimal client for a local Ollama server.

    Args:
        base_url: Server root, e.g. ``http://localhost:11434``.
        model: Model tag used for generation.
        timeout: Seconds to wait for a full (non-streamed) response.
        temperature: Sampling temperature passed in ``options``.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        timeout: float = 120,
        temperature: float = 0.7,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    def __repr__(self) -> str:
        return f"<OllamaClient url={self.base_url!r} model={self.model!r}>"

    # ── API ─────────────────────────────────────────────────────

    def generate(self, prompt: str) -> str:
        """Run a completion and return the model's text.

        Raises:
            OllamaConnectionError: Server unreachable.
            ModelNotFoundError: Model not available locally.
            OllamaError: Any other failure or an empty response.
        """
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        logger.debug("Generating with %s (%d prompt chars)", self.model, len(prompt))
        data = self._request("POST", "/api/generate", payload)

        if data.get("error"):
            raise OllamaError(f"Ollama error: {data['error']}")

        text = data.get("response", "")
        if not text.strip():
            raise OllamaError(f"Model {self.model} returned an empty response")

        logger.info(
            "Generated %d chars in %.1fs",
            len(text),
            (data.get("total_duration") or 0) / 1e9,
        )
        return text

    def list_models(self) -> list[str]:
        """Names of locally available models."""
        data = self._request("GET", "/api/tags")
        return [m.get("name", "") for m in data.get("models", []) if m.get("name")]

    def is_available(self) -> bool:
        """True if the server answers. Never raises."""
        try:
            self.list_models()
            return True
        except OllamaError:
            return False

    # ── Transport ───────────────────────────────────────────────

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        body = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(
            url,
            data=body,
            method=method,
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"gitai/{__version__}",
            },
        )

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            detail = _error_detail(e)
            if e.code == 404 and "not found" in detail.lower():
                raise ModelNotFoundError(
                    f"Model '{self.model}' not found. Pull it first:\n"
                    f"  $ ollama pull {self.model}"
                ) from e
            raise OllamaError(f"Ollama returned HTTP {e.code}: {detail}") from e
        except urllib.error.URLError as e:
            raise OllamaConnectionError(
                f"Cannot connect to Ollama at {self.base_url} ({e.reason}).\n"
                "Make sure it is running:\n"
                "  $ ollama serve"
            ) from e
        except TimeoutError as e:
            raise OllamaConnectionError(
                f"Ollama did not answer within {self.timeout:g}s"
            ) from e
        except (ConnectionError, http.client.HTTPException, OSError) as e:
            raise OllamaConnectionError(
                f"Ollama at {self.base_url} dropped the connection ({e}).\n"
                "Check that the server is healthy and the model fits in memory:\n"
                "  $ ollama serve"
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise OllamaError(f"Invalid JSON from Ollama: {e}") from e

        if not isinstance(data, dict):
            raise OllamaError("Unexpected response shape from Ollama")
        return data


def _error_detail(err: urllib.error.HTTPError) -> str:
    try:
        raw = err.read().decode("utf-8", errors="replace")
    except (OSError, AttributeError):
        return str(err.reason or "")
    try:
        return json.loads(raw).get("error", raw)
    except (json.JSONDecodeError, AttributeError):
        return raw
