"""Unit tests for DI provider selection."""

import pytest

from authrepo.util.di import (
    PersistenceProvider,
    ProdConfigProvider,
    ProdPersistenceProvider,
    get_provider,
    is_mockable,
)
from authrepo.util.di.base import ProviderBase
from tests.di import MockPersistenceProvider


class TestGetProvider:
    """Tests for get_provider()."""

    def test_concrete_provider_is_used_as_is(self):
        assert not is_mockable(ProdConfigProvider)
        assert get_provider(ProdConfigProvider, use_mock=True) is ProdConfigProvider

    def test_component_selects_by_mock_flag(self):
        assert is_mockable(PersistenceProvider)
        assert get_provider(PersistenceProvider) is ProdPersistenceProvider
        assert get_provider(PersistenceProvider, use_mock=True) is MockPersistenceProvider

    def test_missing_implementation_raises(self):
        class CacheProvider(ProviderBase):
            __mock_component__ = "cache"

        class ProdCacheProvider(CacheProvider):
            __is_mock__ = False

        with pytest.raises(ValueError, match="No mock implementation for cache"):
            get_provider(CacheProvider, use_mock=True)
