"""
Shared fixtures: in-memory database, stub collaborators and an API client.
"""
import json
import os
from typing import List, Optional

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nofuss import models  # noqa: F401
from nofuss.auth import SessionVerifier, get_session_verifier
from nofuss.database import Base, configure_engine, get_db
from nofuss.llm import LLMError, LLMProvider, get_llm_provider
from nofuss.main import app
from nofuss.services.build_environment import BuildEnvironment, get_build_environment


BAKERY_SPEC = {
    "purpose": "Showcase a neighbourhood bakery and take pre-orders",
    "target_audience": "Local families and office workers",
    "key_features": ["Menu with prices", "Pre-order form", "Opening hours"],
    "design_preferences": {
        "color_scheme": "Warm browns and cream",
        "style": "Rustic",
        "layout": "Single page with sections",
    },
    "content_sections": ["Hero", "Menu", "About us", "Contact"],
}

BAKERY_CONVERSATION = [
    {"role": "user", "content": "I want a website for my bakery."},
    {"role": "assistant", "content": "Lovely! Who are your customers?"},
    {"role": "user", "content": "Families and office workers nearby."},
    {"role": "assistant", "content": "What should visitors be able to do?"},
    {"role": "user", "content": "See the menu and pre-order bread. Warm, rustic colors."},
]

ALICE = {"Authorization": "Bearer token-alice"}
BOB = {"Authorization": "Bearer token-bob"}


class StubCompletionService(LLMProvider):
    """Deterministic completion service that records every request."""

    def __init__(self, reply: Optional[str] = None):
        self.reply = reply if reply is not None else "```json\n" + json.dumps(BAKERY_SPEC) + "\n```"
        self.queued: List[str] = []
        self.fail = False
        self.calls: List[list] = []

    async def complete(self, messages, model=None, max_tokens=2048, temperature=0.7) -> str:
        self.calls.append(list(messages))
        if self.fail:
            raise LLMError("completion service down")
        if self.queued:
            return self.queued.pop(0)
        return self.reply


class StubBuildEnvironment(BuildEnvironment):
    """Build environment that can be told to fail saves."""

    def __init__(self):
        self.fail_save = False
        self.raise_on_save = False
        self.saved: List[str] = []
        self.provisioned = 0

    async def provision(self, name, description) -> str:
        self.provisioned += 1
        return f"stub-build-{self.provisioned}"

    async def save_state(self, handle: str) -> bool:
        if self.raise_on_save:
            raise RuntimeError("build environment offline")
        if self.fail_save:
            return False
        self.saved.append(handle)
        return True


class StubSessionVerifier(SessionVerifier):
    TOKENS = {"token-alice": "alice", "token-bob": "bob"}

    async def verify(self, token: str) -> Optional[str]:
        return self.TOKENS.get(token)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_engine(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def llm():
    return StubCompletionService()


@pytest.fixture
def build_env():
    return StubBuildEnvironment()


@pytest.fixture
async def client(session_factory, llm, build_env):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_verifier] = lambda: StubSessionVerifier()
    app.dependency_overrides[get_llm_provider] = lambda: llm
    app.dependency_overrides[get_build_environment] = lambda: build_env

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_project(client: AsyncClient, name: str = "Bakery Site", headers=ALICE) -> dict:
    response = await client.post("/projects", json={"name": name}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["project"]


def idea_messages(conversation=BAKERY_CONVERSATION) -> list:
    from nofuss.prompts.idea import IDEA_CONSULTANT_SYSTEM, IDEA_GREETING

    return [
        {"role": "system", "content": IDEA_CONSULTANT_SYSTEM},
        {"role": "assistant", "content": IDEA_GREETING},
        *conversation,
    ]
