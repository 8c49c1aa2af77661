"""
Pytest configuration and shared fixtures for Vibe Writer tests.
"""
import sys
import pytest
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional, Sequence, Union

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from ai_providers import AIProviderType
from core.credentials import InMemoryCredentialStore
from core.pipeline import StageTransport, WritingSession
from core.streaming import Frame


# ============================================================================
# Fakes
# ============================================================================

class FakeDispatcher:
    """
    Stands in for ProviderDispatcher.

    Each stream() call consumes the next script (a list of fragments); the
    last script is reused once the others are used up.
    """

    def __init__(
        self,
        *scripts: Sequence[str],
        fail_with: Optional[Exception] = None,
        refuse_with: Optional[Exception] = None,
    ):
        self.scripts = [list(s) for s in scripts] or [["Hello", " world"]]
        self.fail_with = fail_with
        self.refuse_with = refuse_with
        self.requests = []
        self.closed = 0

    async def stream(self, request):
        self.requests.append(request)
        if self.refuse_with is not None:
            raise self.refuse_with
        script = self.scripts.pop(0) if len(self.scripts) > 1 else self.scripts[0]
        return self._relay(script)

    async def _relay(self, script):
        try:
            for fragment in script:
                yield fragment
            if self.fail_with is not None:
                raise self.fail_with
        finally:
            self.closed += 1


class ScriptedTransport(StageTransport):
    """
    Replays canned framed channels, one per opened stage.

    A script is a list of wire chunks, or an exception raised when the
    stage is opened.
    """

    def __init__(self, *scripts: Union[List[str], Exception]):
        self.scripts = list(scripts)
        self.calls = []

    @property
    def endpoints(self) -> List[str]:
        return [endpoint for endpoint, _ in self.calls]

    @asynccontextmanager
    async def open(self, endpoint, request):
        self.calls.append((endpoint, request))
        if not self.scripts:
            raise AssertionError(f"Unexpected stage opened: {endpoint}")
        script = self.scripts.pop(0)
        if isinstance(script, Exception):
            raise script

        async def channel():
            for chunk in script:
                yield chunk.encode("utf-8")

        yield channel()


def framed(*fragments: str, error: Optional[str] = None, done: bool = True) -> List[str]:
    """Wire chunks for the given fragments, closed by ERROR, DONE or nothing."""
    chunks = [Frame.data(f).encode() for f in fragments]
    if error is not None:
        chunks.append(Frame.error(error).encode())
    elif done:
        chunks.append(Frame.done().encode())
    return chunks


# ============================================================================
# Fixtures: Fakes
# ============================================================================

@pytest.fixture
def make_dispatcher():
    """Factory for FakeDispatcher."""
    return FakeDispatcher


@pytest.fixture
def make_transport():
    """Factory for ScriptedTransport."""
    return ScriptedTransport


@pytest.fixture
def frames():
    """Helper building framed wire chunks."""
    return framed


# ============================================================================
# Fixtures: Session & Credentials
# ============================================================================

@pytest.fixture
def credentials():
    """Credential store holding an OpenAI key."""
    return InMemoryCredentialStore({AIProviderType.OPENAI: "sk-test-1234567890"})


@pytest.fixture
def session():
    """Idle session with source material and the OpenAI provider."""
    return WritingSession(
        source_content="笔记：远程办公让沟通成本变高，但专注时间更多。",
        provider=AIProviderType.OPENAI,
    )


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

@pytest.fixture
def sample_articles():
    """Sample article texts."""
    return {
        "short": "# Title\n\nBody.",
        "draft": "# 远程办公的真相\n\n我在家办公三年了。沟通确实更难。",
        "messy": (
            "#远程办公的真相\r\n"
            "我在家办公三年了。## 第一节\n"
            "沟通确实更难了，每次开会都要提前约时间，临时问一句话也得等半天才有回复。"
            "但专注的时间变多了，一整个上午可以只做一件事，这是在办公室里很难做到的事情。"
            "我觉得这笔账还是划算的。   \n\n\n\n"
            "- 列表项一\n- 列表项二"
        ),
    }


# ============================================================================
# Fixtures: FastAPI Testing
# ============================================================================

@pytest.fixture
def api_client():
    """Create a test client for the FastAPI application."""
    from fastapi.testclient import TestClient
    from api.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# Session-level Setup
# ============================================================================

def pytest_configure(config):
    """Register the markers added below."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests that go through the HTTP app")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Auto-add 'unit' marker to test files in tests/unit/
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        # Auto-add 'integration' marker to test files in tests/integration/
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
