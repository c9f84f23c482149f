# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeModel exceptions."""

from __future__ import annotations


class TreeModelError(Exception):
    """Base exception for TreeModel errors."""

    pass


class NodeNotFoundError(TreeModelError, KeyError):
    """Raised when an identity does not name a node attached to the store."""

    pass


class LoadError(TreeModelError):
    """Raised when a lazy children fetch fails under the RAISE policy."""

    def __init__(self, value: object, cause: BaseException) -> None:
        super().__init__(f"Loading children of {value!r} failed: {cause}")
        self.value = value
        self.cause = cause
