"""Carries metadata from a source image over to its converted file.

The order matters: exiftool rewrites the destination, which bumps its
timestamps, so timestamps are copied afterwards. Platform attributes
(extended attributes, creation date) come last because both previous
steps can reset them.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from static2jxl.processing.tools import ExternalTool

LOGGER = logging.getLogger(__name__)

# Below this share of tags carried over, verbose runs warn.
PRESERVED_WARN_PERCENT = 70


@dataclass(slots=True)
class MetadataReport:
    """What the transfer managed to do. Nothing here fails an item."""

    tags_copied: bool
    timestamps_copied: bool
    attributes_copied: bool
    preserved_percent: Optional[int] = None

    @property
    def degraded(self) -> bool:
        return not self.timestamps_copied


def copy_timestamps(source: Path, dest: Path) -> bool:
    """Copy access and modification times from ``source`` to ``dest``."""

    try:
        st = source.stat()
        os.utime(dest, ns=(st.st_atime_ns, st.st_mtime_ns))
    except OSError as exc:
        LOGGER.debug("timestamp copy failed for %s: %s", dest, exc)
        return False
    return True


def copy_extended_attributes(source: Path, dest: Path) -> bool:
    """Copy extended attributes where the OS exposes them."""

    if not hasattr(os, "listxattr"):
        return True

    copied = True
    try:
        names = os.listxattr(source)
    except OSError as exc:
        LOGGER.debug("cannot list xattrs of %s: %s", source, exc)
        return False

    for name in names:
        try:
            os.setxattr(dest, name, os.getxattr(source, name))
        except OSError as exc:
            LOGGER.debug("xattr %s not copied to %s: %s", name, dest, exc)
            copied = False
    return copied


class MetadataTransfer:
    """Best-effort metadata copy built on exiftool and OS calls."""

    def __init__(
        self,
        exiftool: ExternalTool,
        *,
        get_file_info: Optional[ExternalTool] = None,
        set_file: Optional[ExternalTool] = None,
    ) -> None:
        self.exiftool = exiftool
        self.get_file_info = get_file_info
        self.set_file = set_file

    @classmethod
    def discover(cls, exiftool: ExternalTool, *, timeout: Optional[float] = None) -> "MetadataTransfer":
        if sys.platform == "darwin":
            return cls(
                exiftool,
                get_file_info=ExternalTool.discover("GetFileInfo", timeout=timeout),
                set_file=ExternalTool.discover("SetFile", timeout=timeout),
            )
        return cls(exiftool)

    def copy_tags(self, source: Path, dest: Path) -> bool:
        """Copy EXIF, IPTC, XMP and the ICC profile."""

        result = self.exiftool.run(
            "-tagsfromfile",
            str(source),
            "-all:all",
            "-icc_profile",
            "-overwrite_original",
            str(dest),
        )
        return result.ok

    def copy_creation_time(self, source: Path, dest: Path) -> bool:
        if self.get_file_info is None or self.set_file is None:
            return True
        if not (self.get_file_info.available and self.set_file.available):
            return False

        info = self.get_file_info.run("-d", str(source))
        if not info.ok or not info.stdout.strip():
            return False
        return self.set_file.run("-d", info.stdout.strip(), str(dest)).ok

    def copy_platform_attributes(self, source: Path, dest: Path) -> bool:
        xattrs = copy_extended_attributes(source, dest)
        created = self.copy_creation_time(source, dest)
        return xattrs and created

    def count_tags(self, path: Path) -> Optional[int]:
        result = self.exiftool.run("-s", "-s", "-s", str(path))
        if not result.ok:
            return None
        return len([line for line in result.stdout.splitlines() if line.strip()])

    def preserved_percent(self, source: Path, dest: Path) -> Optional[int]:
        """Share of source tags that made it to ``dest``, as a percentage."""

        source_tags = self.count_tags(source)
        dest_tags = self.count_tags(dest)
        if source_tags is None or dest_tags is None:
            return None
        if source_tags == 0:
            return 100
        return dest_tags * 100 // source_tags

    def transfer(self, source: Path, dest: Path, *, verify: bool = False) -> MetadataReport:
        tags_copied = self.copy_tags(source, dest)
        if not tags_copied:
            LOGGER.debug("metadata copy partial: %s", dest)

        timestamps_copied = copy_timestamps(source, dest)
        if not timestamps_copied:
            LOGGER.debug("timestamp preservation failed: %s", dest)

        attributes_copied = self.copy_platform_attributes(source, dest)

        report = MetadataReport(tags_copied, timestamps_copied, attributes_copied)
        if verify:
            report.preserved_percent = self.preserved_percent(source, dest)
            if report.preserved_percent is not None:
                if report.preserved_percent >= PRESERVED_WARN_PERCENT:
                    LOGGER.debug("metadata: %d%% preserved for %s", report.preserved_percent, dest)
                else:
                    LOGGER.warning("metadata: only %d%% preserved for %s", report.preserved_percent, dest)
        return report
