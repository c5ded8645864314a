from __future__ import annotations

import json
import logging
import os
import http.client
import time
import urllib.request

logger = logging.getLogger(__name__)


class LLMClient:
    """Minimal Ollama chat client. Any failure yields "" so callers can fall back."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("OLLAMA_BASE_URL", "http://127.0.0.1:11434")).rstrip("/")
        self.model = model or os.getenv("OLLAMA_MODEL", "llama3.1:8b")
        self.timeout_seconds = timeout_seconds or float(os.getenv("OLLAMA_TIMEOUT_SECONDS", "30"))
        self.temperature = float(os.getenv("OLLAMA_TEMPERATURE", "0.7"))
        self.max_tokens = int(os.getenv("OLLAMA_MAX_TOKENS", "300"))

    def complete(self, prompt: str, system: str | None = None) -> str:
        started = time.perf_counter()
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        req = urllib.request.Request(
            url=f"{self.base_url}/api/chat",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        try:
            logger.info(
                "LLMClient chat start model=%s base_url=%s prompt_chars=%d timeout=%.1fs",
                self.model,
                self.base_url,
                len(prompt),
                self.timeout_seconds,
            )
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except (OSError, http.client.HTTPException, ValueError) as exc:
            # OSError covers URLError and timeouts; ValueError covers bad JSON and bad UTF-8.
            logger.warning("LLMClient chat failed after %.2fs: %s", time.perf_counter() - started, exc)
            return ""

        message = body.get("message") if isinstance(body, dict) else None
        content = message.get("content", "") if isinstance(message, dict) else ""
        logger.info("LLMClient chat complete in %.2fs response_chars=%d", time.perf_counter() - started, len(str(content)))
        return content.strip() if isinstance(content, str) else ""
