"""
Wiki file entity.

A WikiFile holds the current revision info of one uploaded file, and
optionally its revision history, and supports upload, download, delete
and revert. Failures are recorded in ``file.error`` rather than raised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..api.types import (
    DeleteResult,
    FileRevision,
    RevertResult,
    UploadResult,
    api_error,
    single_page,
)
from ..exceptions import FileAccessError
from ..local.file_ops import read_bytes, write_bytes_atomic
from ..logging_utils import EntityLoggerAdapter

if TYPE_CHECKING:
    from ..client import WikiClient

logger = logging.getLogger(__name__)

FILE_NAMESPACE = "File:"

# Every imageinfo property exposed on FileRevision
IMAGEINFO_PROPS = (
    "badfile",
    "bitdepth",
    "canonicaltitle",
    "comment",
    "commonmetadata",
    "dimensions",
    "extmetadata",
    "mediatype",
    "metadata",
    "mime",
    "parsedcomment",
    "sha1",
    "size",
    "thumbmime",
    "timestamp",
    "uploadwarning",
    "url",
    "user",
    "userid",
)


class WikiFile:
    """A file on the wiki, with its current info and revision history.

    Use ``await WikiFile.create(filename, client)`` (or ``client.get_file``)
    to get an instance populated from the wiki.

    Attributes:
        filename: File name without the ``File:`` prefix
        exists: True if the wiki has a file under this name
        invalid: True if the wiki rejected the name itself
        error: Error record of the last failing call, None after a success
        info: Current revision, None until fetched or if the file is missing
        history: Revisions newest first (index 0 = current), once fetched
    """

    def __init__(self, filename: str, client: WikiClient):
        if not filename or not filename.strip():
            raise ValueError("Filename must not be blank")
        self.filename = filename
        self.client = client
        self.exists = False
        self.invalid = False
        self.error: dict[str, Any] | None = None
        self.info: FileRevision | None = None
        self.history: list[FileRevision] | None = None
        self._log = EntityLoggerAdapter(logger, {"wiki_file": filename})

    @classmethod
    async def create(cls, filename: str, client: WikiClient) -> WikiFile:
        """Construct a file and fetch its current info."""
        wiki_file = cls(filename, client)
        await wiki_file.get_info(refresh=True)
        if wiki_file.invalid:
            wiki_file.error = {"file": "Invalid filename - cannot create WikiFile"}
        return wiki_file

    @property
    def title(self) -> str:
        return f"{FILE_NAMESPACE}{self.filename}"

    # -------------------------------------------------------------------------
    # Info and history
    # -------------------------------------------------------------------------

    async def get_info(
        self,
        refresh: bool = False,
        history: Mapping[str, Any] | None = None,
    ) -> FileRevision | None:
        """Return the current revision info, querying the wiki if ``refresh``.

        Args:
            refresh: Query the wiki again
            history: Extra imageinfo parameters (iilimit, iistart, iiend)
                that request older revisions as well

        Returns:
            The current revision, or None if missing, invalid or on error
        """
        if not refresh:
            return self.info

        props = list(IMAGEINFO_PROPS)
        params: dict[str, Any] = {"titles": self.title, "prop": "info|imageinfo"}
        if history is not None:
            params.update(history)
            props.append("archivename")
        params["iiprop"] = props

        envelope = await self.client.query(params)

        error = api_error(envelope)
        if error is not None:
            self.error = error
            return None
        self.error = None

        page = single_page(envelope)
        if "invalid" in page:
            self.invalid = True
            self._log.warning("Invalid filename")
            return None

        if "missing" not in page and page.get("imageinfo"):
            self.exists = True
            revisions = [FileRevision.from_dict(item) for item in page["imageinfo"]]
            self.info = revisions[0]
            self.history = revisions

        return self.info

    async def get_history(
        self,
        refresh: bool = False,
        limit: int | None = None,
        start: str | None = None,
        end: str | None = None,
    ) -> list[FileRevision] | None:
        """Return the revision history, newest first.

        Args:
            refresh: Query the wiki again
            limit: Number of revisions to fetch (default: the API maximum)
            start: Timestamp to start listing from
            end: Timestamp to stop listing at
        """
        if refresh:
            params = {
                "iilimit": limit if limit is not None else "max",
                "iistart": start,
                "iiend": end,
            }
            if await self.get_info(True, params) is None:
                return None
        return self.history

    def get_revision(self, revision: int | str) -> FileRevision | None:
        """Select a revision by history index or by exact timestamp."""
        found: FileRevision | None = None
        if isinstance(revision, int) and not isinstance(revision, bool):
            if self.history is not None and 0 <= revision < len(self.history):
                found = self.history[revision]
        elif self.history is None:
            self.error = {"file": f"History for Revision '{revision}' is null"}
            return None
        else:
            found = next((item for item in self.history if item.timestamp == revision), None)

        if found is None:
            self.error = {"file": f"Revision '{revision}' was not found for this file"}
            return None
        self.error = None
        return found

    def revision_info(self, revision: int | str | None = None) -> FileRevision | None:
        """The current info, or the given revision's info."""
        if revision is None:
            return self.info
        return self.get_revision(revision)

    def get_archive_name(self, revision: int | str) -> str | None:
        """Archive name of an older revision, used by revert and delete."""
        info = self.get_revision(revision)
        if info is None:
            return None
        if info.archive_name is None:
            self.error = {"file": "This revision contains no archive name"}
            return None
        return info.archive_name

    # -------------------------------------------------------------------------
    # Delete and revert
    # -------------------------------------------------------------------------

    async def delete(self, reason: str | None = None, archive_name: str | None = None) -> bool:
        """Delete the file, or only the old revision ``archive_name``."""
        envelope = await self.client.delete(
            {"title": self.title, "reason": reason, "oldimage": archive_name}
        )
        if envelope is None:
            self.error = self.client.error
            return False

        if DeleteResult.from_response(envelope) is not None:
            if archive_name is None:
                self.exists = False
            self.error = None
            self._log.info(f"Deleted {archive_name or 'file'}")
            return True

        self.error = api_error(envelope) or {"file": "Unexpected delete response"}
        return False

    async def revert(self, archive_name: str, reason: str | None = None) -> bool:
        """Revert the file to the old revision ``archive_name``."""
        envelope = await self.client.filerevert(
            {"filename": self.filename, "archivename": archive_name, "comment": reason}
        )
        if envelope is None:
            self.error = self.client.error
            return False

        if RevertResult.from_response(envelope).success:
            self._log.info(f"Reverted to {archive_name}")
            # The revert created a new current revision
            await self.get_info(refresh=True)
            return self.error is None

        result = RevertResult.from_response(envelope).result
        self.error = api_error(envelope) or {"file": f"Unexpected revert response: {result}"}
        return False

    # -------------------------------------------------------------------------
    # Download
    # -------------------------------------------------------------------------

    async def download_data(self) -> bytes | None:
        """Download the current revision's contents."""
        if self.info is None or not self.info.url:
            self.error = {"file": "No download URL known for this file"}
            return None

        data = await self.client.download(self.info.url)
        self.error = self.client.error if data is None else None
        return data

    async def download_file(self, path: str | Path) -> bool:
        """Download the current revision to ``path``."""
        data = await self.download_data()
        if data is None:
            return False

        try:
            await write_bytes_atomic(path, data)
        except FileAccessError as e:
            self._log.warning(f"{e.message}")
            self.error = {"file": f"Unable to write file '{path}'"}
            return False
        return True

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    async def _upload(
        self,
        params: dict[str, Any],
        comment: str,
        text: str | None,
        overwrite: bool,
    ) -> bool:
        if self.exists and not overwrite:
            self.error = {"file": "Cannot overwrite existing file"}
            return False

        params.update(
            {
                "filename": self.filename,
                "comment": comment,
                "text": text,
                "ignorewarnings": overwrite,
            }
        )

        envelope = await self.client.upload(params)
        if envelope is None:
            self.error = self.client.error
            return False

        result = UploadResult.from_response(envelope)
        if result.success:
            self.exists = True
            if result.image_info is not None:
                self.info = result.image_info
            self.error = None
            self._log.info("Uploaded file", extra={"sha1": self.info.sha1 if self.info else None})
            return True

        self.error = api_error(envelope) or {
            "file": f"Unexpected upload response: {result.result}"
        }
        return False

    async def upload_data(
        self,
        data: bytes,
        comment: str,
        text: str | None = None,
        overwrite: bool = False,
    ) -> bool:
        """Upload ``data`` as this file.

        Args:
            data: File contents
            comment: Upload comment
            text: Initial description page text for new files
            overwrite: Allow replacing an existing file (ignores warnings)
        """
        return await self._upload({"file": data}, comment, text, overwrite)

    async def upload_file(
        self,
        path: str | Path,
        comment: str,
        text: str | None = None,
        overwrite: bool = False,
    ) -> bool:
        """Upload the local file at ``path`` as this file."""
        try:
            data = await read_bytes(path)
        except FileAccessError as e:
            self._log.warning(f"{e.message}")
            self.error = {"file": f"Unable to read file '{path}'"}
            return False
        return await self.upload_data(data, comment, text, overwrite)

    async def upload_from_url(
        self,
        url: str,
        comment: str,
        text: str | None = None,
        overwrite: bool = False,
    ) -> bool:
        """Have the wiki fetch the file from ``url``."""
        return await self._upload({"url": url}, comment, text, overwrite)
