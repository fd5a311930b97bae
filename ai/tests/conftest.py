import os
import tempfile
import pytest
from pathlib import Path

from dotenv import load_dotenv

# load test env first
env_path = Path(__file__).resolve().parents[1] / '.env.test'
if env_path.exists():
    load_dotenv(env_path)

# module-level config is read at import time, so isolate before any flashdeck import
_tmp_root = tempfile.mkdtemp(prefix='flashdeck-tests-')
os.environ.setdefault('TESTING', '1')
os.environ['DECK_DB_PATH'] = ':memory:'
os.environ['REDIS_CACHE_ENABLED'] = 'false'
os.environ['UPLOAD_DIR'] = os.path.join(_tmp_root, 'uploads')
os.environ['LOG_FILE_PATH'] = os.path.join(_tmp_root, 'logs')
os.environ.setdefault('LOG_LEVEL', 'WARNING')
os.environ.pop('GROQ_API_KEY', None)
os.environ.pop('OPENAI_API_KEY', None)

from tests.fixtures.mock_openai import make_openai_class  # noqa: E402
from tests.fixtures.mock_redis import MockRedisClient  # noqa: E402


@pytest.fixture(autouse=True)
def reset_singletons():
    from flashdeck.decks import DeckRepository
    from flashdeck.generation import FlashcardGenerator
    from flashdeck.storage import TextStore

    for cls in (DeckRepository, TextStore, FlashcardGenerator):
        cls._instance = None
    yield
    if DeckRepository._instance is not None:
        DeckRepository._instance.close()
    for cls in (DeckRepository, TextStore, FlashcardGenerator):
        cls._instance = None


@pytest.fixture(autouse=True)
def no_provider_keys(monkeypatch):
    monkeypatch.delenv('GROQ_API_KEY', raising=False)
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)
    yield


@pytest.fixture
def fake_clock():
    class Clock:
        def __init__(self):
            self.now = 1_000_000.0

        def __call__(self):
            return self.now

        def advance(self, seconds):
            self.now += seconds

    return Clock()


@pytest.fixture
def mock_redis_client(monkeypatch):
    import flashdeck.storage.text_store as ts_mod

    client = MockRedisClient()
    monkeypatch.setattr(ts_mod, 'REDIS_CACHE_ENABLED', True)
    monkeypatch.setattr(ts_mod.redis, 'Redis', lambda *a, **k: client)
    return client


@pytest.fixture
def mock_openai(monkeypatch):
    """Install a scripted OpenAI client; call with the outcomes to replay."""
    import flashdeck.generation.generator as gen_mod

    def install(outcomes=None, groq=True, openai_fallback=False):
        cls = make_openai_class(outcomes)
        monkeypatch.setattr(gen_mod, 'OpenAI', cls)
        if groq:
            monkeypatch.setenv('GROQ_API_KEY', 'test-groq-key')
        if openai_fallback:
            monkeypatch.setenv('OPENAI_API_KEY', 'test-openai-key')
        return cls

    return install


@pytest.fixture
def repo():
    from flashdeck.decks import DeckRepository

    repository = DeckRepository(':memory:')
    yield repository
    repository.close()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    import main as ai_main

    return TestClient(ai_main.app)
