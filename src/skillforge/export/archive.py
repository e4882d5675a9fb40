"""Zip packaging of rendered skill documents.

Layout: the main document at the archive root, every reference
document under ``references/``. Output is deterministic: entries are
written in a stable order with a fixed timestamp and fixed
permissions, so identical documents always produce identical bytes.
"""

from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Mapping

from skillforge.constants import (
    ARCHIVE_COMPRESS_LEVEL,
    ARCHIVE_FIXED_DATE_TIME,
    MAIN_DOCUMENT_NAMES,
    REFERENCES_DIR,
)
from skillforge.resilience.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

_FILE_MODE = 0o644 << 16


def archive_filename(artifact_name: str) -> str:
    """Download filename for an artifact's archive."""
    return f"{artifact_name}.zip"


def check_reference_name(name: str) -> None:
    """Reference files live flat under ``references/``; reject paths."""
    if (
        not name
        or "/" in name
        or "\\" in name
        or name in (".", "..")
    ):
        raise ValidationError(f"Invalid reference filename: {name!r}")


class ArtifactPackager:
    """Builds a DEFLATE (level 9) zip from a main document + references."""

    def __init__(self, main_filename: str = MAIN_DOCUMENT_NAMES[0]) -> None:
        if main_filename not in MAIN_DOCUMENT_NAMES:
            raise ConfigurationError(
                f"Main document must be one of {MAIN_DOCUMENT_NAMES},"
                f" got {main_filename!r}"
            )
        self._main_filename = main_filename

    @property
    def main_filename(self) -> str:
        return self._main_filename

    def package(
        self,
        main_document: str,
        references: Mapping[str, str],
        artifact_name: str,
    ) -> bytes:
        for name in references:
            check_reference_name(name)

        buffer = io.BytesIO()
        with zipfile.ZipFile(
            buffer,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=ARCHIVE_COMPRESS_LEVEL,
        ) as archive:
            self._write(archive, self._main_filename, main_document)
            for name in sorted(references):
                self._write(
                    archive, f"{REFERENCES_DIR}/{name}", references[name]
                )
            archive.comment = artifact_name.encode()[:65535]

        data = buffer.getvalue()
        logger.info(
            "event=artifact_packaged name=%s entries=%d bytes=%d",
            artifact_name,
            1 + len(references),
            len(data),
        )
        return data

    @staticmethod
    def _write(archive: zipfile.ZipFile, arcname: str, content: str) -> None:
        info = zipfile.ZipInfo(arcname, date_time=ARCHIVE_FIXED_DATE_TIME)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = _FILE_MODE
        archive.writestr(
            info, content.encode(), compresslevel=ARCHIVE_COMPRESS_LEVEL
        )
