"""DI providers for the auth repository.

Every provider in PROVIDERS is either concrete or the base of a mockable
component. A component base has one production and one mock subclass,
told apart by ``__is_mock__``; tests pick per component which one to use.
"""

from typing import Type

from authrepo.util.di.application import ProdApplicationProvider
from authrepo.util.di.base import Component, ProviderBase
from authrepo.util.di.core import ProdConfigProvider
from authrepo.util.di.domain import ProdDomainProvider
from authrepo.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
    RepositoryProvider,
)

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    RepositoryProvider,
    # Mockable: in-memory store in tests, SQL store in production
    PersistenceProvider,
]


def is_mockable(base: Type[ProviderBase]) -> bool:
    """Whether a provider is a component base with swappable implementations."""
    return bool(base.__subclasses__())


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Select the provider class to instantiate for an entry of PROVIDERS.

    Args:
        base: Entry of PROVIDERS
        use_mock: Pick the mock implementation of a mockable component

    Returns:
        ``base`` itself when concrete, otherwise the matching subclass

    Raises:
        ValueError: If the component has no implementation of that kind
    """
    if not is_mockable(base):
        return base

    for impl in base.__subclasses__():
        if getattr(impl, "__is_mock__", False) == use_mock:
            return impl

    kind = "mock" if use_mock else "production"
    component_name = getattr(base, "__mock_component__", None) or base.__name__
    raise ValueError(f"No {kind} implementation for {component_name}")


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "is_mockable",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "RepositoryProvider",
    "PersistenceProvider",
    "ProdPersistenceProvider",
]
