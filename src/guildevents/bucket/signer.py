"""AWS SigV4 request signing for bodyless S3 object reads.

Every request this package sends is a HEAD or GET of a single object with no
query string and no body, so the canonical request always carries the same
three signed headers and the hash of an empty payload.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from guildevents.common.settings import Settings

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
TERMINATOR = "aws4_request"

# SHA-256 of b""; bodyless requests never need to hash a payload
EMPTY_PAYLOAD_HASH = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

# Lowercase and in canonical (sorted) order
SIGNED_HEADERS = ("host", "x-amz-content-sha256", "x-amz-date")
SIGNED_HEADER_LIST = ";".join(SIGNED_HEADERS)

SIGNABLE_METHODS = frozenset({"HEAD", "GET"})

_AMZ_DATE_RE = re.compile(r"^\d{8}T\d{6}Z$")


@dataclass(frozen=True)
class Credentials:
    """Static bucket credentials and the scope they sign for."""

    access_key: str
    secret_key: str = field(repr=False)
    region: str
    host: str

    @classmethod
    def from_settings(cls, settings: Settings) -> Credentials:
        """Build credentials from settings, failing if any are missing."""
        settings.require_credentials()
        return cls(
            access_key=settings.access_key or "",
            secret_key=settings.secret_key or "",
            region=settings.bucket_region,
            host=settings.effective_bucket_host,
        )


@dataclass(frozen=True)
class SigningContext:
    """Everything that goes into the signature of one request."""

    method: str
    path: str
    timestamp: str
    host: str
    region: str

    def __post_init__(self) -> None:
        if self.method not in SIGNABLE_METHODS:
            raise ValueError(f"Unsupported method for signing: {self.method!r}")
        if not self.path or self.path.startswith("/"):
            raise ValueError(f"Object path must be relative and non-empty: {self.path!r}")
        if not _AMZ_DATE_RE.match(self.timestamp):
            raise ValueError(f"Timestamp is not in YYYYMMDDTHHMMSSZ form: {self.timestamp!r}")

    @property
    def date(self) -> str:
        """Date part of the timestamp (YYYYMMDD)."""
        return self.timestamp[:8]

    @property
    def scope(self) -> str:
        """Credential scope: date/region/service/terminator."""
        return f"{self.date}/{self.region}/{SERVICE}/{TERMINATOR}"

    @property
    def canonical_headers(self) -> tuple[tuple[str, str], ...]:
        """Signed headers as (name, value) pairs, in SIGNED_HEADERS order."""
        return (
            ("host", self.host),
            ("x-amz-content-sha256", EMPTY_PAYLOAD_HASH),
            ("x-amz-date", self.timestamp),
        )


@dataclass(frozen=True)
class SigningTrace:
    """Intermediate values of one signature, for debugging 403 responses."""

    canonical_request: str
    string_to_sign: str
    signature: str
    authorization: str


def build_canonical_request(context: SigningContext) -> str:
    """
    Build the canonical request string.

    Fields are method, URI, query string (always empty), canonical headers
    (each terminated by a newline), signed header list and payload hash.
    """
    canonical_headers = "".join(f"{name}:{value}\n" for name, value in context.canonical_headers)
    return "\n".join(
        [
            context.method,
            f"/{context.path}",
            "",
            canonical_headers,
            SIGNED_HEADER_LIST,
            EMPTY_PAYLOAD_HASH,
        ]
    )


def build_string_to_sign(context: SigningContext, canonical_request: str) -> str:
    """Build the string to sign from a canonical request."""
    return "\n".join(
        [
            ALGORITHM,
            context.timestamp,
            context.scope,
            hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
        ]
    )


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


@lru_cache(maxsize=16)
def derive_signing_key(secret_key: str, date: str, region: str, service: str = SERVICE) -> bytes:
    """
    Derive the signing key for one day, region and service.

    Args:
        secret_key: Secret access key
        date: Date string (YYYYMMDD)
        region: Bucket region
        service: Service code

    Returns:
        Raw signing key bytes
    """
    date_key = _hmac_sha256(("AWS4" + secret_key).encode("utf-8"), date)
    region_key = _hmac_sha256(date_key, region)
    service_key = _hmac_sha256(region_key, service)
    return _hmac_sha256(service_key, TERMINATOR)


def sign(signing_key: bytes, string_to_sign: str) -> str:
    """Create a hex-encoded SigV4 signature."""
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def trace_signature(
    credentials: Credentials,
    method: str,
    path: str,
    timestamp: str,
) -> SigningTrace:
    """Run the full signing pipeline, keeping every intermediate value."""
    context = SigningContext(
        method=method,
        path=path,
        timestamp=timestamp,
        host=credentials.host,
        region=credentials.region,
    )
    canonical_request = build_canonical_request(context)
    string_to_sign = build_string_to_sign(context, canonical_request)
    signing_key = derive_signing_key(credentials.secret_key, context.date, context.region)
    signature = sign(signing_key, string_to_sign)
    authorization = (
        f"{ALGORITHM} Credential={credentials.access_key}/{context.scope}, "
        f"SignedHeaders={SIGNED_HEADER_LIST}, "
        f"Signature={signature}"
    )
    return SigningTrace(
        canonical_request=canonical_request,
        string_to_sign=string_to_sign,
        signature=signature,
        authorization=authorization,
    )


def compute_authorization_header(
    credentials: Credentials,
    method: str,
    path: str,
    timestamp: str,
) -> str:
    """Compute the Authorization header value for one request."""
    return trace_signature(credentials, method, path, timestamp).authorization


def signed_headers(
    credentials: Credentials,
    method: str,
    path: str,
    timestamp: str,
) -> dict[str, str]:
    """Headers that must accompany a signed request."""
    return {
        "Authorization": compute_authorization_header(credentials, method, path, timestamp),
        "x-amz-content-sha256": EMPTY_PAYLOAD_HASH,
        "x-amz-date": timestamp,
    }
