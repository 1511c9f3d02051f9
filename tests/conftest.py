import json
from pathlib import Path

import pytest

from chatwire.services.function_calling import FunctionExecutor

# Recorded API payloads used by the integration tests
RESPONSES_DIR = Path(__file__).parent / "integration" / "__responses__"


@pytest.fixture()
def executor() -> FunctionExecutor:
    """Fixture to create an empty FunctionExecutor."""
    return FunctionExecutor()


@pytest.fixture(scope="session")
def load_response():
    """Fixture to load a recorded API payload by file name."""

    def _load(name: str):
        path = RESPONSES_DIR / name
        text = path.read_text(encoding="utf-8")
        return json.loads(text) if path.suffix == ".json" else text

    return _load
