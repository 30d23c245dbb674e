# nourishnote/conftest.py
import sys
import pytest
from pathlib import Path

# Add repository root to PYTHONPATH
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    """
    Create all database tables before running tests.

    Uses the configured DATABASE_URL (in-memory SQLite by default).
    """
    from nourishnote.core.database import create_all_tables
    create_all_tables()
    yield


@pytest.fixture(scope="function", autouse=True)
def reset_db():
    """
    Clear every table before each test so users never leak between tests.
    """
    from nourishnote.core.database import clear_all_tables
    clear_all_tables()
    yield


@pytest.fixture(scope="function")
def fake_llm():
    """Factory for scripted chat models: fake_llm("reply one", "reply two")."""
    from langchain_core.language_models.fake_chat_models import FakeListChatModel

    def _make(*responses: str):
        return FakeListChatModel(responses=list(responses))

    return _make
