"""Dependency injection containers."""

from dishka import AsyncContainer, Scope, from_context, make_async_container

from authrepo.config import AuthSettings
from authrepo.domain.repository import DocumentStore
from authrepo.util.di import PROVIDERS, get_provider
from authrepo.util.di.application import ProdApplicationProvider
from authrepo.util.di.base import ProviderBase
from authrepo.util.di.domain import ProdDomainProvider
from authrepo.util.di.infrastructure import RepositoryProvider


class StoreContextProvider(ProviderBase):
    """Takes the document store and auth settings from container context."""

    scope = Scope.APP

    store = from_context(provides=DocumentStore, scope=Scope.APP)
    auth_settings = from_context(provides=AuthSettings, scope=Scope.APP)


def create_container() -> AsyncContainer:
    """Build production container (all prod implementations).

    Settings are loaded from environment variables automatically.

    Returns:
        Configured DI container with production providers
    """
    # Get provider instances - all are instantiated without arguments
    provider_instances = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*provider_instances)


def create_store_container(store: DocumentStore, auth_settings: AuthSettings) -> AsyncContainer:
    """Build a container around a caller-owned store.

    Used to embed the repository without environment settings. The caller
    keeps ownership of the store, so closing the container leaves it open.

    Args:
        store: Document store
        auth_settings: Auth settings

    Returns:
        DI container providing the repositories, services and AuthRepository
    """
    return make_async_container(
        StoreContextProvider(),
        RepositoryProvider(),
        ProdDomainProvider(),
        ProdApplicationProvider(),
        context={DocumentStore: store, AuthSettings: auth_settings},
    )
