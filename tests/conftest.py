# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

Every test runs against its own in-memory SQLite database. Outbound email
is captured by a fake mailer and providers are replaced by stub adapters,
so no test touches the network.
"""

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.api.app import create_app
from zimlearn.api.dependencies import LIBRARY, OER, SBP, YOUTUBE, ZIMSEC, AppContainer
from zimlearn.core.config.settings import (
    DatabaseSettings,
    JWTSettings,
    RateLimitSettings,
    Settings,
    SMTPSettings,
)
from zimlearn.domains.auth.jwt import JWTManager
from zimlearn.domains.auth.password import PasswordHasher
from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.infrastructure.database.connection import Database
from zimlearn.infrastructure.notifications import EmailDeliveryError
from zimlearn.models.common import ResourceSource, ResourceType


# =============================================================================
# Test doubles
# =============================================================================


class FakeMailer:
    """Records verification codes instead of sending them.

    Set fail to True to simulate an SMTP outage.
    """

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail = False

    async def send_verification_code(self, to_email: str, name: str, code: str) -> str:
        if self.fail:
            raise EmailDeliveryError("SMTP unavailable")
        self.sent.append({"to": to_email, "name": name, "code": code})
        return f"<{len(self.sent)}@test>"

    def last_code_for(self, email: str) -> str:
        for message in reversed(self.sent):
            if message["to"] == email:
                return message["code"]
        raise AssertionError(f"No code sent to {email}")


class StubAdapter(ResourceAdapter):
    """Adapter returning canned drafts, or failing like a broken provider."""

    default_author = "Stub Author"

    def __init__(
        self,
        source: ResourceSource,
        count: int = 2,
        error: Exception | None = None,
        drafts: list[ResourceDraft] | None = None,
    ) -> None:
        super().__init__(client=None, base_url="http://stub.invalid")  # type: ignore[arg-type]
        self.source = source  # type: ignore[misc]
        self.count = count
        self.error = error
        self.drafts = drafts
        self.queries: list[FetchQuery] = []

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        if self.drafts is not None:
            return [dict(draft) for draft in self.drafts]
        return [
            self.build_draft(
                query,
                title=f"{self.name} {query.subject.value} {index}",
                url=f"https://{self.name.lower()}.example/{index}",
                resource_type=ResourceType.BOOK.value,
            )
            for index in range(1, self.count + 1)
        ]


# =============================================================================
# Settings and infrastructure
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated in-memory test run."""
    return Settings(
        environment="test",
        debug=False,
        log_level="DEBUG",
        database=DatabaseSettings(
            url="sqlite+aiosqlite:///:memory:",
            connect_retry_attempts=1,
            connect_retry_delay=0,
        ),
        jwt=JWTSettings(secret_key="test-secret-key-for-jwt-testing"),
        smtp=SMTPSettings(username="noreply@zimlearn.test", password="smtp-password"),
        rate_limit=RateLimitSettings(enabled=False),
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """In-memory database with the schema created."""
    db = Database(settings.database)
    await db.create_all()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Session on the test database."""
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Fast hasher for tests."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def jwt_manager(settings: Settings) -> JWTManager:
    """JWT manager with the test secret."""
    return JWTManager(settings.jwt)


@pytest.fixture
def mailer() -> FakeMailer:
    """Captures verification emails."""
    return FakeMailer()


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def make_adapter() -> type[StubAdapter]:
    """The stub adapter class, for tests that build their own."""
    return StubAdapter


@pytest.fixture
def library_adapters() -> list[StubAdapter]:
    """MoPSE, CollegePress and Teacha stubs returning two drafts each."""
    return [
        StubAdapter(ResourceSource.MOPSE),
        StubAdapter(ResourceSource.COLLEGE_PRESS),
        StubAdapter(ResourceSource.TEACHA),
    ]


@pytest.fixture
def adapter_groups(library_adapters: list[StubAdapter]) -> dict[str, list[Any]]:
    """Stub adapters for every fetch route."""
    return {
        LIBRARY: library_adapters,
        OER: [StubAdapter(ResourceSource.OER_COMMONS), StubAdapter(ResourceSource.CK12)],
        SBP: [StubAdapter(ResourceSource.SECONDARY_BOOK_PRESS, count=1)],
        YOUTUBE: [StubAdapter(ResourceSource.YOUTUBE, count=3)],
        ZIMSEC: [StubAdapter(ResourceSource.ZIMSEC, count=1)],
    }


@pytest.fixture
def container(
    settings: Settings,
    database: Database,
    jwt_manager: JWTManager,
    password_hasher: PasswordHasher,
    mailer: FakeMailer,
    adapter_groups: dict[str, list[Any]],
) -> AppContainer:
    """Application container wired with test doubles."""
    return AppContainer(
        settings=settings,
        database=database,
        jwt_manager=jwt_manager,
        password_hasher=password_hasher,
        mailer=mailer,
        adapters=adapter_groups,
    )


@pytest_asyncio.fixture
async def client(container: AppContainer) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client talking to the app in process."""
    app = create_app(container=container)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def student_headers(jwt_manager: JWTManager) -> dict[str, str]:
    """Bearer header for a student."""
    token = jwt_manager.create_access_token(
        user_id="student-1",
        email="student@zimlearn.test",
        role="student",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(jwt_manager: JWTManager) -> dict[str, str]:
    """Bearer header for an admin."""
    token = jwt_manager.create_access_token(
        user_id="admin-1",
        email="admin@zimlearn.test",
        role="admin",
    )
    return {"Authorization": f"Bearer {token}"}
