# fixlens - Fix previews and duplicate detection for code fragments
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Error types and the soft-failure diagnostic channel.

Public operations never raise these at the caller. They are built at the
point of failure, logged, and handed to an optional ``on_error`` callback
so callers can observe what went wrong without losing the safe default.
"""

import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class FixlensError(Exception):
    """Base class for fixlens errors."""


class InputMalformed(FixlensError, ValueError):
    """Input that cannot be read as fragments, text or issue metadata."""


class DimensionMismatch(FixlensError, ValueError):
    """Embeddings of different lengths in one corpus."""


class ComputationFailure(FixlensError):
    """An unexpected error during diff, summary, risk or grouping work."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed{detail}")


# Diagnostic callback: receives the wrapped failure
ErrorCallback = Callable[[FixlensError], None]


def report_failure(
    operation: str,
    exc: BaseException,
    on_error: Optional[ErrorCallback] = None,
    log: Optional[logging.Logger] = None,
) -> ComputationFailure:
    """
    Log a soft failure and forward it to ``on_error``.

    Returns the wrapped error so the caller can attach it to a result if it
    wants to. Exceptions raised by the callback itself are logged and
    dropped.
    """
    failure = ComputationFailure(operation, exc)
    failure.__cause__ = exc
    (log or logger).warning(f"{operation} failed, returning default: {exc}")

    if on_error is not None:
        try:
            on_error(failure)
        except Exception as callback_exc:
            logger.debug(f"on_error callback raised: {callback_exc}")

    return failure
