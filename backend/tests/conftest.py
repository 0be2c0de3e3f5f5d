from __future__ import annotations

from typing import Callable

import pytest

from backend.neighborhoods.pipeline import Collaborators
from fakes import FAST_PROVIDER_CONFIG, FakeLLM, FakeMaps, FakeReddit


@pytest.fixture
def make_collaborators() -> Callable[..., Collaborators]:
    def _make(llm=None, reddit=None, maps=None) -> Collaborators:
        return Collaborators(
            llm=llm or FakeLLM(),
            reddit=reddit or FakeReddit(),
            maps=maps or FakeMaps(),
            provider_config=FAST_PROVIDER_CONFIG,
        )
    return _make
