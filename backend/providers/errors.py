from __future__ import annotations


class ProviderError(Exception):
    """A provider answered, but not with something we can use."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
