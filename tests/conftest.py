from pathlib import Path
import sys

import pytest

# Ensure repository root is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from tests.fakes import FakeRunner  # noqa: E402


@pytest.fixture
def runner() -> FakeRunner:
    """Fixture providing a scripted command runner with no responses yet."""
    return FakeRunner()
