"""
Per-user bearer credentials.

Only an HMAC of the raw credential is stored; the raw value is shown once,
when it is issued. The short prefix is kept so a user can tell keys apart.
"""
import hashlib
import hmac
import secrets
from typing import NamedTuple

from habitsync.settings import settings


CREDENTIAL_PREFIX = "hs_"
DISPLAY_PREFIX_LEN = 8


class IssuedCredential(NamedTuple):
    raw: str
    digest: str
    prefix: str


def _signing_secret() -> str:
    secret = settings.API_KEY_SECRET
    if not secret:
        raise RuntimeError("API_KEY_SECRET is required to hash credentials")
    return secret


def hash_credential(raw: str) -> str:
    return hmac.new(_signing_secret().encode("utf-8"), raw.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_credential() -> IssuedCredential:
    raw = CREDENTIAL_PREFIX + secrets.token_urlsafe(32)
    return IssuedCredential(raw=raw, digest=hash_credential(raw), prefix=raw[:DISPLAY_PREFIX_LEN])


def credentials_match(expected: str | None, given: str | None) -> bool:
    if expected is None or given is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), given.encode("utf-8"))
