from __future__ import annotations

import logging

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You help people choose a neighborhood to live in. "
    "Answer with the JSON structure requested by the user and nothing else."
)


class LLMClient:
    """Thin wrapper over the Groq chat API used by every pipeline prompt.

    ``complete`` never raises: a disabled client, a missing key or an API
    failure all produce an empty string, which the callers' JSON parsing
    turns into their documented fallback.
    """

    def __init__(self, config: LLMConfig = DEFAULT_LLM_CONFIG) -> None:
        self.config = config

    @property
    def available(self) -> bool:
        return self.config.enabled and bool(self.config.api_key)

    def complete(self, prompt: str, temperature: float = 0.5) -> str:
        if not self.available:
            return ""

        try:
            client = Groq(api_key=self.config.api_key, timeout=self.config.timeout)
            response = client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.config.max_tokens,
                temperature=temperature,
            )
            return response.choices[0].message.content or ""

        except Exception:
            logger.warning("Groq completion failed, caller will use its fallback", exc_info=True)
            return ""
