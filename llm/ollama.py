# llm/ollama.py
from __future__ import annotations

import os
import re
from typing import Any, Dict, Optional

import requests

from .base import LLM

DEFAULT_OLLAMA = "http://localhost:11434"


def _timeouts() -> tuple[float, float]:
    """(connect, read) seconds; small CPU models can take minutes on a cold load."""
    ct = float(os.getenv("OLLAMA_CONNECT_TIMEOUT", "10"))
    rt = float(os.getenv("OLLAMA_READ_TIMEOUT", "120"))
    return (ct, rt)


def normalize_endpoint(ep: Optional[str]) -> str:
    """explicit endpoint > OLLAMA_HOST > default; ensure scheme; strip trailing slash."""
    cand = (ep or os.getenv("OLLAMA_HOST") or DEFAULT_OLLAMA).strip()
    if not re.match(r"^https?://", cand):
        cand = "http://" + cand
    return cand.rstrip("/")


class OllamaLLM(LLM):
    """
    Minimal client for a local Ollama server. One non-streaming
    /api/generate call per question; the model stays loaded server-side.
    """

    def __init__(
        self,
        model: str,
        endpoint: Optional[str] = None,
        keep_alive: Optional[str] = None,
        max_tokens: int = 512,
    ) -> None:
        self.model = model
        self.base = normalize_endpoint(endpoint)
        self.keep_alive = keep_alive
        self.max_tokens = max_tokens

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **_: Any,
    ) -> str:
        url = f"{self.base}/api/generate"
        payload: Dict[str, Any] = {"model": self.model, "prompt": prompt, "stream": False}
        if system:
            payload["system"] = system
        if self.keep_alive:
            payload["keep_alive"] = self.keep_alive

        options: Dict[str, Any] = {"num_predict": int(max_tokens or self.max_tokens)}
        if temperature is not None:
            options["temperature"] = float(temperature)
        payload["options"] = options

        r = requests.post(url, json=payload, timeout=_timeouts())
        r.raise_for_status()
        return (r.json().get("response") or "").strip()

    __call__ = generate
