"""Test configuration and fixtures."""

import pytest
import pytest_asyncio

from authrepo.adapter.digest import DigestAuthFunctions
from authrepo.adapter.hashing import Pbkdf2PasswordHasher
from authrepo.application.auth_repository import AuthRepository
from authrepo.config import AuthSettings
from authrepo.domain.service import CredentialService, SessionReconciler, UniquenessGuard
from authrepo.persistence.repository import (
    DocumentUserAuthDetailsRepository,
    DocumentUserAuthRepository,
)
from authrepo.persistence.store import InMemoryDocumentStore
from authrepo.persistence.schema import AuthSchema
from authrepo.util.locks import KeyedLock


def make_digest_headers(
    digest: DigestAuthFunctions,
    user_name: str,
    password: str,
    private_key: str,
    realm: str = "/auth/digest",
    ip_address: str = "127.0.0.1",
    nc: str = "00000001",
    nonce: str | None = None,
) -> dict[str, str]:
    """Build the parsed headers a browser would send for a digest login."""
    nonce = nonce or digest.create_nonce(ip_address, private_key)
    ha1 = digest.compute_ha1(user_name, realm, password)
    ha2 = digest.compute_ha2("GET", "/secured")
    return {
        "username": user_name,
        "realm": realm,
        "nonce": nonce,
        "uri": "/secured",
        "nc": nc,
        "cnonce": "0a4f113b",
        "qop": "auth",
        "method": "GET",
        "userhostaddress": ip_address,
        "response": digest.compute_response(ha1, nonce, nc, "0a4f113b", "auth", ha2),
    }


@pytest.fixture
def auth_settings() -> AuthSettings:
    """Auth settings with a cheap hash work factor."""
    return AuthSettings(hash_iterations=1000)


@pytest.fixture
def hasher(auth_settings) -> Pbkdf2PasswordHasher:
    return Pbkdf2PasswordHasher(iterations=auth_settings.hash_iterations)


@pytest.fixture
def digest() -> DigestAuthFunctions:
    return DigestAuthFunctions()


@pytest_asyncio.fixture
async def store() -> InMemoryDocumentStore:
    """In-memory store with every collection and index created."""
    store = InMemoryDocumentStore()
    await AuthSchema(store).create_missing_collections()
    return store


@pytest.fixture
def user_auth_repo(store) -> DocumentUserAuthRepository:
    return DocumentUserAuthRepository(store)


@pytest.fixture
def details_repo(store) -> DocumentUserAuthDetailsRepository:
    return DocumentUserAuthDetailsRepository(store)


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def guard(user_auth_repo) -> UniquenessGuard:
    return UniquenessGuard(user_auth_repo)


@pytest.fixture
def credential_service(
    user_auth_repo, guard, hasher, digest, auth_settings, locks
) -> CredentialService:
    return CredentialService(
        user_auth_repository=user_auth_repo,
        uniqueness_guard=guard,
        password_hasher=hasher,
        digest_auth=digest,
        auth_settings=auth_settings,
        locks=locks,
    )


@pytest.fixture
def session_reconciler(user_auth_repo, details_repo, guard, locks) -> SessionReconciler:
    return SessionReconciler(
        user_auth_repository=user_auth_repo,
        user_auth_details_repository=details_repo,
        uniqueness_guard=guard,
        locks=locks,
    )


@pytest_asyncio.fixture
async def auth_repository(auth_settings) -> AuthRepository:
    """Auth repository on a fresh in-memory store."""
    return await AuthRepository.create(InMemoryDocumentStore(), auth_settings)
