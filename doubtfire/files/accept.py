# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Decide if an uploaded file is what it claims to be.

We never trust the file name or the content type declared by the
client: the type comes from the bytes themselves, via libmagic.
"""

from __future__ import annotations

import logging
from pathlib import Path
import tempfile

import magic

from doubtfire.files.pdf_tools import pdf_valid


log = logging.getLogger("files")

accepted_mime_prefixes = {
    "image": (
        "image/png",
        "image/gif",
        "image/bmp",
        "image/tiff",
        "image/jpeg",
        "image/x-ms-bmp",
    ),
    "code": ("text/x-pascal", "text/x-c", "text/x-c++", "text/plain", "text/"),
    # one day perhaps msword and openxml documents too
    "document": ("application/pdf",),
}

_magic = None


def _get_magic():
    global _magic
    if _magic is None:
        _magic = magic.Magic(mime=True)
    return _magic


def sniff_mime(upload) -> str:
    """The MIME type of a file, judged from its content.

    Args:
        upload: a path (`str` or `pathlib.Path`), raw `bytes`, or an
            object with a ``read`` method.

    Returns:
        A string such as ``"image/png"``.

    Raises:
        OSError: cannot read the file.
        magic.MagicException: libmagic could not make sense of it.
    """
    if isinstance(upload, (bytes, bytearray)):
        return _get_magic().from_buffer(bytes(upload))
    if hasattr(upload, "read"):
        pos = upload.tell() if hasattr(upload, "seek") else None
        data = upload.read()
        if pos is not None:
            upload.seek(pos)
        return _get_magic().from_buffer(data)
    return _get_magic().from_file(str(upload))


def accept_file(upload, name: str, kind: str, **pdf_kw) -> bool:
    """Test if a file should be accepted as an expected kind.

    Args:
        upload: the uploaded data: a path, bytes or a file-like object.
        name: a human-readable name, only used in log messages.
        kind: what the uploader says it is: "document", "code" or "image".

    Keyword Args:
        Passed to :func:`doubtfire.files.pdf_tools.pdf_valid` when
        checking documents, e.g., ``timeout`` or ``pdftk``.

    Returns:
        True if the sniffed MIME type is acceptable for the kind, and
        (for documents) the PDF is structurally sound.  Unknown kinds
        and anything that goes wrong give False; no exceptions escape.
    """
    log.debug("accept_file %s, %s", name, kind)
    accept = accepted_mime_prefixes.get(kind)
    if accept is None:
        log.error("Unknown type '%s' provided for '%s'", kind, name)
        return False

    try:
        mime = sniff_mime(upload)
    except (OSError, magic.MagicException) as e:
        log.error("Could not determine type of '%s': %s", name, e)
        return False
    log.debug(" -- %s is mime type: %s", name, mime)

    if not mime.startswith(accept):
        log.info("Rejected '%s': %s is not a valid %s", name, mime, kind)
        return False

    if kind == "document":
        return _document_valid(upload, **pdf_kw)
    return True


def _document_valid(upload, **pdf_kw) -> bool:
    if isinstance(upload, (str, Path)):
        return pdf_valid(upload, **pdf_kw)
    if hasattr(upload, "read"):
        pos = upload.tell()
        data = upload.read()
        upload.seek(pos)
    else:
        data = bytes(upload)
    with tempfile.TemporaryDirectory() as tmpdir:
        f = Path(tmpdir) / "upload.pdf"
        f.write_bytes(data)
        return pdf_valid(f, **pdf_kw)
