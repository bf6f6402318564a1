"""
Typed records for API response envelopes.

The request engine returns envelopes untouched; the client and entities
read them through these records instead of probing nested dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SUCCESS = "Success"


class TokenKind(str, Enum):
    """Token types the client knows how to request."""

    CSRF = "csrf"
    LOGIN = "login"


def api_error(envelope: dict[str, Any] | None) -> dict[str, Any] | None:
    """Return the envelope's ``error`` member, if any."""
    if not envelope:
        return None
    error = envelope.get("error")
    if error is None:
        return None
    return error if isinstance(error, dict) else {"info": str(error)}


@dataclass
class TokenResult:
    """Result of ``action=query&meta=tokens``."""

    kind: TokenKind
    token: str | None

    @classmethod
    def from_response(cls, kind: TokenKind, envelope: dict[str, Any]) -> TokenResult:
        tokens = envelope.get("query", {}).get("tokens", {})
        return cls(kind=kind, token=tokens.get(f"{kind.value}token"))


@dataclass
class LoginResult:
    """Result of ``action=login``."""

    result: str | None
    user_id: int | None = None
    username: str | None = None
    reason: str | None = None

    @property
    def success(self) -> bool:
        return self.result == SUCCESS

    @classmethod
    def from_response(cls, envelope: dict[str, Any]) -> LoginResult:
        login = envelope.get("login", {})
        return cls(
            result=login.get("result"),
            user_id=login.get("lguserid"),
            username=login.get("lgusername"),
            reason=login.get("reason"),
        )


@dataclass
class EditResult:
    """Result of ``action=edit``."""

    result: str | None
    captcha: dict[str, Any] | None = None
    page_id: int | None = None
    title: str | None = None
    old_revid: int | None = None
    new_revid: int | None = None
    new_timestamp: str | None = None
    no_change: bool = False

    @property
    def success(self) -> bool:
        return self.result == SUCCESS

    @classmethod
    def from_response(cls, envelope: dict[str, Any]) -> EditResult:
        edit = envelope.get("edit", {})
        return cls(
            result=edit.get("result"),
            captcha=edit.get("captcha"),
            page_id=edit.get("pageid"),
            title=edit.get("title"),
            old_revid=edit.get("oldrevid"),
            new_revid=edit.get("newrevid"),
            new_timestamp=edit.get("newtimestamp"),
            no_change="nochange" in edit,
        )


@dataclass
class DeleteResult:
    """Result of ``action=delete``; present only when the delete happened."""

    title: str | None = None
    reason: str | None = None
    log_id: int | None = None

    @classmethod
    def from_response(cls, envelope: dict[str, Any]) -> DeleteResult | None:
        delete = envelope.get("delete")
        if delete is None:
            return None
        return cls(
            title=delete.get("title"),
            reason=delete.get("reason"),
            log_id=delete.get("logid"),
        )


@dataclass
class RevertResult:
    """Result of ``action=filerevert``."""

    result: str | None

    @property
    def success(self) -> bool:
        return self.result == SUCCESS

    @classmethod
    def from_response(cls, envelope: dict[str, Any]) -> RevertResult:
        return cls(result=envelope.get("filerevert", {}).get("result"))


@dataclass
class FileRevision:
    """Properties of one file revision (an ``imageinfo`` item).

    Every property requested by ``WikiFile`` is a field; anything else the
    server sends remains available in ``raw``.
    """

    timestamp: str | None = None
    user: str | None = None
    user_id: int = 0
    size: int = 0
    width: int = 0
    height: int = 0
    bit_depth: int = 0
    sha1: str | None = None
    mime: str | None = None
    thumb_mime: str = ""
    media_type: str | None = None
    url: str | None = None
    description_url: str | None = None
    canonical_title: str | None = None
    comment: str | None = None
    parsed_comment: str | None = None
    metadata: list[Any] | None = None
    common_metadata: list[Any] | None = None
    extended_metadata: dict[str, Any] | None = None
    archive_name: str | None = None
    anon: bool = False
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height, or 0 when dimensions are unknown."""
        if self.height > 0:
            return self.width / self.height
        return 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileRevision:
        return cls(
            timestamp=data.get("timestamp"),
            user=data.get("user"),
            user_id=int(data.get("userid") or 0),
            size=int(data.get("size") or 0),
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
            bit_depth=int(data.get("bitdepth") or 0),
            sha1=data.get("sha1"),
            mime=data.get("mime"),
            thumb_mime=data.get("thumbmime") or "",
            media_type=data.get("mediatype"),
            url=data.get("url"),
            description_url=data.get("descriptionurl"),
            canonical_title=data.get("canonicaltitle"),
            comment=data.get("comment"),
            parsed_comment=data.get("parsedcomment"),
            metadata=data.get("metadata"),
            common_metadata=data.get("commonmetadata"),
            extended_metadata=data.get("extmetadata"),
            archive_name=data.get("archivename"),
            anon="anon" in data,
            raw=dict(data),
        )


@dataclass
class UploadResult:
    """Result of ``action=upload``."""

    result: str | None
    filename: str | None = None
    image_info: FileRevision | None = None
    warnings: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.result == SUCCESS

    @classmethod
    def from_response(cls, envelope: dict[str, Any]) -> UploadResult:
        upload = envelope.get("upload", {})
        info = upload.get("imageinfo")
        return cls(
            result=upload.get("result"),
            filename=upload.get("filename"),
            image_info=FileRevision.from_dict(info) if info else None,
            warnings=upload.get("warnings", {}),
        )


def single_page(envelope: dict[str, Any]) -> dict[str, Any]:
    """Return the one page object of a ``titles=`` query.

    ``query.pages`` is keyed by page id (negative for missing pages) in the
    legacy JSON format, and a list with ``formatversion=2``.
    """
    pages = envelope.get("query", {}).get("pages", {})
    if isinstance(pages, dict):
        values = list(pages.values())
    else:
        values = list(pages)
    return values[-1] if values else {}
