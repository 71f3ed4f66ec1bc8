# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

The AppContainer is the composition root. It owns the long-lived objects
(database engine, HTTP client, mailer, token manager and the provider
adapters) and lives on app.state.container. Services are built per
request around a fresh database session.

Example:
    @router.get("/resources")
    async def list_resources(
        catalog: CatalogService = Depends(get_catalog_service),
    ):
        ...
"""

import logging
from dataclasses import dataclass, field
from typing import AsyncGenerator

import httpx
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.api.middleware.auth import CurrentUser, get_auth_failure, get_current_user
from zimlearn.core.config.settings import ProviderSettings, Settings
from zimlearn.domains.auth.jwt import JWTManager
from zimlearn.domains.auth.password import PasswordHasher
from zimlearn.domains.auth.service import AccountService, VerificationMailer
from zimlearn.domains.resources.adapters import (
    CK12Adapter,
    CollegePressAdapter,
    MoPSEAdapter,
    OERCommonsAdapter,
    ResourceAdapter,
    SecondaryBookPressAdapter,
    TeachaAdapter,
    YouTubeAdapter,
    ZimsecAdapter,
)
from zimlearn.domains.resources.aggregation import AggregationService
from zimlearn.domains.resources.catalog import CatalogService
from zimlearn.infrastructure.database.connection import Database
from zimlearn.infrastructure.notifications import EmailSender

logger = logging.getLogger(__name__)

# Adapter groups, each in its fixed aggregation order
LIBRARY = "library"
OER = "oer"
SBP = "sbp"
YOUTUBE = "youtube"
ZIMSEC = "zimsec"


# =========================================================================
# Composition root
# =========================================================================


@dataclass
class AppContainer:
    """Long-lived application objects.

    Attributes:
        settings: Application settings.
        database: Engine and session factory.
        jwt_manager: Access token manager.
        password_hasher: bcrypt password hasher.
        mailer: Verification code sender.
        http_client: Shared outbound HTTP client, or None when no adapter
            needs one.
        adapters: Provider adapters by group name.
    """

    settings: Settings
    database: Database
    jwt_manager: JWTManager
    password_hasher: PasswordHasher
    mailer: VerificationMailer
    http_client: httpx.AsyncClient | None = None
    adapters: dict[str, list[ResourceAdapter]] = field(default_factory=dict)

    async def close(self) -> None:
        """Release the HTTP client and database connections."""
        if self.http_client is not None:
            await self.http_client.aclose()
        await self.database.close()


def build_adapters(
    client: httpx.AsyncClient,
    providers: ProviderSettings,
) -> dict[str, list[ResourceAdapter]]:
    """Create every provider adapter, grouped by the route that uses it.

    Args:
        client: Shared HTTP client.
        providers: Provider base URLs and keys.

    Returns:
        Adapter lists keyed by group name.
    """
    api_key = providers.youtube_api_key
    return {
        LIBRARY: [
            MoPSEAdapter(client, providers.mopse_api_url),
            CollegePressAdapter(client, providers.collegepress_api_url),
            TeachaAdapter(client, providers.teacha_api_url),
        ],
        OER: [
            OERCommonsAdapter(client, providers.oer_commons_api_url),
            CK12Adapter(client, providers.ck12_api_url),
        ],
        SBP: [SecondaryBookPressAdapter(client, providers.sbp_base_url)],
        YOUTUBE: [
            YouTubeAdapter(
                client,
                providers.youtube_api_url,
                api_key.get_secret_value() if api_key else None,
            )
        ],
        ZIMSEC: [ZimsecAdapter(client, providers.zimsec_api_url)],
    }


def build_container(settings: Settings) -> AppContainer:
    """Create the application container from settings.

    Args:
        settings: Application settings.

    Returns:
        AppContainer with a fresh engine, HTTP client and adapters.
    """
    http_client = httpx.AsyncClient(
        timeout=settings.providers.request_timeout,
        follow_redirects=True,
        headers={"User-Agent": "ZimLearn/1.0"},
    )
    return AppContainer(
        settings=settings,
        database=Database(settings.database),
        jwt_manager=JWTManager(settings.jwt),
        password_hasher=PasswordHasher(),
        mailer=EmailSender(settings.smtp),
        http_client=http_client,
        adapters=build_adapters(http_client, settings.providers),
    )


def get_container(request: Request) -> AppContainer:
    """Get the application container.

    Raises:
        HTTPException: If the application has not finished starting.
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting",
        )
    return container


async def get_db(
    container: AppContainer = Depends(get_container),
) -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for one request.

    Services commit their own work; anything left uncommitted is rolled
    back when the session closes.

    Yields:
        AsyncSession.
    """
    async with container.database.sessionmaker() as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require an authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired.
    """
    user = get_current_user(request)
    if user is not None:
        return user

    if get_auth_failure(request) == "missing":
        detail = "Authentication token required"
    else:
        detail = "Invalid or expired token"

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_admin(user: CurrentUser = Depends(require_auth)) -> CurrentUser:
    """Require an authenticated admin.

    Raises:
        HTTPException: 401 if not authenticated, 403 if not an admin.
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


# =========================================================================
# Service Dependencies
# =========================================================================


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    """Get CatalogService instance."""
    return CatalogService(db)


def get_account_service(
    db: AsyncSession = Depends(get_db),
    container: AppContainer = Depends(get_container),
) -> AccountService:
    """Get AccountService instance."""
    return AccountService(
        db,
        password_hasher=container.password_hasher,
        jwt_manager=container.jwt_manager,
        mailer=container.mailer,
    )


class AggregatorDependency:
    """Dependency building an AggregationService over one adapter group.

    Example:
        >>> get_library_aggregator = AggregatorDependency(LIBRARY)
        >>> async def fetch(aggregator = Depends(get_library_aggregator)):
        ...     ...
    """

    def __init__(self, group: str) -> None:
        """Initialize with the adapter group name.

        Args:
            group: Key into AppContainer.adapters.
        """
        self.group = group

    def __call__(
        self,
        db: AsyncSession = Depends(get_db),
        container: AppContainer = Depends(get_container),
    ) -> AggregationService:
        """Build the aggregator for this request."""
        return AggregationService(container.adapters.get(self.group, []), db)


get_library_aggregator = AggregatorDependency(LIBRARY)
get_oer_aggregator = AggregatorDependency(OER)
get_sbp_aggregator = AggregatorDependency(SBP)
get_youtube_aggregator = AggregatorDependency(YOUTUBE)
get_zimsec_aggregator = AggregatorDependency(ZIMSEC)
