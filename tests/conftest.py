import pytest
from langchain_core.language_models import FakeListChatModel

from gitconsistent import create_app
from gitconsistent.services.llm_service import LLM_EXTENSION_KEY, LLMService
from gitconsistent.services.store_service import STORE_EXTENSION_KEY


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "DATA_DIR": str(tmp_path),
            "STORE_BACKEND": "json",
            "AUTH_MODE": "dev",
            "TIMEZONE": "UTC",
        }
    )
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def store(app):
    return app.extensions[STORE_EXTENSION_KEY]


@pytest.fixture()
def auth_headers():
    return {"Authorization": "Bearer dev:alice"}


@pytest.fixture()
def other_headers():
    return {"Authorization": "Bearer dev:bob"}


@pytest.fixture()
def fake_llm(app):
    """Install an LLMService whose chat model replays ``responses`` in order."""

    def install(*responses):
        svc = LLMService(llm=FakeListChatModel(responses=list(responses)))
        app.extensions[LLM_EXTENSION_KEY] = svc
        return svc

    return install

