"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from simpleauth.config import SecureStoreSettings, Settings
from simpleauth.domain.repository import BiometricPreferenceStore, SecureIdentityStore
from simpleauth.domain.value import StoreNamespace
from simpleauth.persistence.database import (
    create_engine,
    create_schema,
    create_session_factory,
)
from simpleauth.persistence.repository import (
    SqliteBiometricPreferenceStore,
    SqliteSecureIdentityStore,
)
from simpleauth.util.di.base import ProviderBase
from simpleauth.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using a local SQLite database."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()
        logfire.info("Database engine disposed")

    @provide(scope=Scope.APP)
    async def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory once the schema exists."""
        await create_schema(engine)
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_secure_identity_store(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        secure_store_settings: SecureStoreSettings,
    ) -> SecureIdentityStore:
        """Provide secure identity store in the configured namespace."""
        return SqliteSecureIdentityStore(
            session_factory,
            namespace=secure_store_settings.namespace,
            account=secure_store_settings.account,
        )

    @provide(scope=Scope.APP)
    def get_biometric_preference_store(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ) -> BiometricPreferenceStore:
        """Provide biometric preference store."""
        return SqliteBiometricPreferenceStore(
            session_factory,
            namespace=StoreNamespace(service=settings.biometrics.preference_service),
        )
