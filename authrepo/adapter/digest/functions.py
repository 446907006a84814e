"""HTTP digest authentication (RFC 2617) functions.

Header values are passed as a mapping of the parsed ``Authorization: Digest``
parameters (``username``, ``realm``, ``nonce``, ``uri``, ``response``,
``nc``, ``cnonce``, ``qop``) plus request data supplied by the caller:
``method``, ``userhostaddress`` and optionally ``requesturl``.
"""

import hashlib
import hmac
import time
from base64 import b64decode, b64encode
from binascii import Error as Base64Error
from collections.abc import Mapping

from authrepo.domain.service import DigestAuth
from authrepo.util.logging import get_logger

logger = get_logger(__name__)


def _md5_hex(value: str) -> str:
    return hashlib.md5(value.encode("utf-8"), usedforsecurity=False).hexdigest()


class DigestAuthFunctions(DigestAuth):
    """Digest HA1/response computation and nonce handling."""

    def compute_ha1(self, user_name: str, realm: str, password: str) -> str:
        return _md5_hex(f"{user_name}:{realm}:{password}")

    def compute_ha2(self, method: str, uri: str) -> str:
        return _md5_hex(f"{method}:{uri}")

    def compute_response(
        self, ha1: str, nonce: str, nc: str, cnonce: str, qop: str, ha2: str
    ) -> str:
        return _md5_hex(f"{ha1}:{nonce}:{nc}:{cnonce}:{qop.lower()}:{ha2}")

    def create_nonce(self, ip_address: str, private_key: str, timestamp_ms: int | None = None) -> str:
        """Issue a nonce bound to the client address and the server secret.

        Args:
            ip_address: Client IP address
            private_key: Server secret
            timestamp_ms: Issue time in epoch milliseconds, now if None

        Returns:
            Base64 encoded ``timestamp:hash`` nonce
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        signature = _md5_hex(f"{timestamp_ms}:{ip_address}:{private_key}")
        return b64encode(f"{timestamp_ms}:{signature}".encode("utf-8")).decode("ascii")

    def validate_nonce(self, nonce: str, ip_address: str, private_key: str) -> int | None:
        """Check a nonce was issued by us for this address.

        Returns:
            Issue time in epoch milliseconds if authentic, None otherwise
        """
        try:
            decoded = b64decode(nonce, validate=True).decode("utf-8")
        except (Base64Error, UnicodeDecodeError, ValueError):
            return None

        timestamp, _, signature = decoded.partition(":")
        if not timestamp.isdigit() or not signature:
            return None

        expected = _md5_hex(f"{timestamp}:{ip_address}:{private_key}")
        if not hmac.compare_digest(signature, expected):
            return None
        return int(timestamp)

    def validate_response(
        self,
        digest_headers: Mapping[str, str],
        private_key: str,
        nonce_timeout: int,
        ha1: str,
        sequence: str | None,
    ) -> bool:
        try:
            nonce = digest_headers["nonce"]
            nc = digest_headers["nc"]
            uri = digest_headers["uri"]
            response = digest_headers["response"]
            method = digest_headers["method"]
            cnonce = digest_headers["cnonce"]
            qop = digest_headers["qop"]
        except KeyError as e:
            logger.debug(f"Digest response missing parameter {e}")
            return False

        # Replayed nonce count
        if sequence is not None and nc == sequence:
            logger.debug("Digest response replays nonce count")
            return False

        request_url = digest_headers.get("requesturl")
        if request_url is not None and uri != request_url:
            logger.debug("Digest uri does not match request url")
            return False

        issued_ms = self.validate_nonce(nonce, digest_headers.get("userhostaddress", ""), private_key)
        if issued_ms is None:
            logger.debug("Digest nonce is not authentic")
            return False
        if issued_ms + nonce_timeout * 1000 < int(time.time() * 1000):
            logger.debug("Digest nonce is stale")
            return False

        expected = self.compute_response(
            ha1, nonce, nc, cnonce, qop, self.compute_ha2(method, uri)
        )
        return hmac.compare_digest(expected, response)
