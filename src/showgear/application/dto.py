"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CreatedCopyDTO:
    source_id: int
    copy_index: int
    item_id: int
    serial_number: str
    image_copied: bool | None


@dataclass(frozen=True)
class CopyFailureDTO:
    source_id: int
    copy_index: int
    serial_number: str
    message: str


@dataclass(frozen=True)
class ImageCopyFailureDTO:
    source_id: int
    item_id: int
    message: str


@dataclass(frozen=True)
class BatchDuplicateDTO:
    """Output: everything a batch duplication produced, in attempt order."""

    created: list[CreatedCopyDTO]
    failures: list[CopyFailureDTO]
    image_copy_failures: list[ImageCopyFailureDTO]
    progress: int
    cancelled: bool

