"""Authentication: Basic, Digest and OAuth2 inherited from the login session."""

from .negotiator import (
    digest_retry_header,
    httpx_auth,
    inherit_login_credentials,
    preemptive_headers,
)

__all__ = [
    "digest_retry_header",
    "httpx_auth",
    "inherit_login_credentials",
    "preemptive_headers",
]
