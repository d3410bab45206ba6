# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Typed failures raised by services and mapped to HTTP responses in main."""

from typing import Any


class AlbumRankError(Exception):
    """Base class. Never raised directly."""

    status_code = 500

    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(AlbumRankError):
    """Bad input: winner not in pair, reorder ids mismatch, missing field."""

    status_code = 422


class DuplicateListError(ValidationError):
    """A list with the same (kind, name) or (kind, year) already exists."""

    status_code = 409


class AuthorizationError(AlbumRankError):
    """Caller does not own the resource."""

    status_code = 403


class NotFoundError(AlbumRankError):
    """List, album or slug absent."""

    status_code = 404

    def __init__(self, entity_type: str, entity_id: Any = None) -> None:
        if entity_id is None:
            message = f"{entity_type} not found"
        else:
            message = f"{entity_type} {entity_id} not found"
        super().__init__(message)
        self.entity_type = entity_type
        self.entity_id = entity_id


class UpstreamCollaboratorError(AlbumRankError):
    """Catalog lookup or artwork fetch/storage failed."""

    status_code = 502


class PersistenceError(AlbumRankError):
    """A write failed part way through a multi-step operation.

    ``step`` names the step that failed so callers know what state was left behind.
    """

    status_code = 500

    def __init__(self, message: str, step: str | None = None) -> None:
        super().__init__(message)
        self.step = step


class ReorderError(PersistenceError):
    """A position write failed during a two-phase reorder.

    When ``phase`` is "final" some rows may still hold offset positions; the
    caller should issue a corrective reorder.
    """

    def __init__(self, list_id: int, phase: str, index: int, album_id: int, cause: Exception) -> None:
        super().__init__(
            f"Reorder of list {list_id} failed in {phase} pass at index {index} (album {album_id}): {cause}",
            step=f"reorder:{phase}",
        )
        self.list_id = list_id
        self.phase = phase
        self.index = index
        self.album_id = album_id


class ComparisonStepError(PersistenceError):
    """A comparison failed after validation.

    ``step`` is one of ensure_ratings, persist:comparison, persist:ratings.
    """
