"""File reading for attachments and submissions.

Files are read off the event loop and encoded as base64 data URLs, the opaque
payload stored in SubmissionFile.data. A batch is all-or-nothing: if any file
fails, none of them are attached.
"""

import asyncio
import base64
import logging
import mimetypes
import os
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional, Tuple, Union

from core.exceptions import FileReadError
from schemas.assignment import SubmissionFile

logger = logging.getLogger(__name__)

FileSource = Union[str, os.PathLike, BinaryIO]

DEFAULT_MIME_TYPE = "application/octet-stream"


def _source_name(source: FileSource) -> str:
    if isinstance(source, (str, os.PathLike)):
        return Path(source).name
    return Path(getattr(source, "name", "") or "upload").name


def _read_bytes(source: FileSource) -> Tuple[str, bytes]:
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        return path.name, path.read_bytes()
    content = source.read()
    if not isinstance(content, bytes):
        raise TypeError("file handle must be opened in binary mode")
    return _source_name(source), content


def encode_data_url(content: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{encoded}"


async def read_file(source: FileSource, mime_type: Optional[str] = None) -> SubmissionFile:
    """Read one file into a SubmissionFile.

    Args:
        source: A path or a binary file handle.
        mime_type: Explicit MIME type; guessed from the name when omitted.

    Returns:
        SubmissionFile with name, MIME type and data URL.

    Raises:
        FileReadError: If the file cannot be read.
    """
    try:
        name, content = await asyncio.to_thread(_read_bytes, source)
    except (OSError, TypeError, ValueError) as e:
        raise FileReadError(_source_name(source), str(e)) from e

    resolved_type = mime_type or mimetypes.guess_type(name)[0] or ""
    logger.debug("Read %s (%d bytes, %s)", name, len(content), resolved_type or "unknown type")
    return SubmissionFile(
        name=name,
        type=resolved_type,
        data=encode_data_url(content, resolved_type),
    )


async def read_files(sources: Iterable[FileSource]) -> List[SubmissionFile]:
    """Read several files concurrently.

    Raises:
        FileReadError: If any file fails; the whole batch is rejected.
    """
    return list(await asyncio.gather(*(read_file(s) for s in sources)))


class StagedFiles:
    """Files staged on a submission or assignment form before it is sent."""

    def __init__(self):
        self._files: List[SubmissionFile] = []

    @property
    def files(self) -> List[SubmissionFile]:
        return list(self._files)

    async def attach(self, sources: Iterable[FileSource]) -> List[SubmissionFile]:
        """Read and stage a batch of files, appending all of them or none.

        Raises:
            FileReadError: If any file in the batch fails.
        """
        try:
            files = await read_files(sources)
        except FileReadError as e:
            logger.warning("Failed to read one or more files: %s", e)
            raise
        self._files.extend(files)
        return files

    def remove(self, index: int) -> None:
        if 0 <= index < len(self._files):
            del self._files[index]

    def clear(self) -> None:
        self._files.clear()
