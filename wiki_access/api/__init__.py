"""
Request engine, token cache and typed response records.
"""

from .engine import (
    LAG_HEADER,
    MAXLAG_DEFAULT,
    RETRY_AFTER_HEADER,
    UNLIMITED_RETRIES,
    CallStats,
    RequestEngine,
    RequestState,
    RetryPolicy,
    normalize_params,
)
from .multipart import build_multipart_body, make_boundary
from .tokens import TokenCache
from .types import (
    DeleteResult,
    EditResult,
    FileRevision,
    LoginResult,
    RevertResult,
    TokenKind,
    TokenResult,
    UploadResult,
    api_error,
)

__all__ = [
    "LAG_HEADER",
    "MAXLAG_DEFAULT",
    "RETRY_AFTER_HEADER",
    "UNLIMITED_RETRIES",
    "CallStats",
    "DeleteResult",
    "EditResult",
    "FileRevision",
    "LoginResult",
    "RequestEngine",
    "RequestState",
    "RetryPolicy",
    "RevertResult",
    "TokenCache",
    "TokenKind",
    "TokenResult",
    "UploadResult",
    "api_error",
    "build_multipart_body",
    "make_boundary",
    "normalize_params",
]
