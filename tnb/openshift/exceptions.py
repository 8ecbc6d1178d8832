#!/usr/bin/env python3
# tnb-openshift
# Copyright(C) 2026 tnb-openshift contributors
#
# This program is free software: you can redistribute it and / or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

"""Exceptions within tnb-openshift library."""

from typing import Any


class TnbException(Exception):
    """An exception raised within tnb-openshift library."""


class OCError(TnbException):
    """An exception raised on error when calling OpenShift client binary."""


class ConfigurationError(TnbException):
    """An exception raised when a configuration property is missing or malformed."""


class ServiceNotFound(TnbException):
    """An exception raised when no implementation is registered for the requested service."""


class WaitError(TnbException):
    """An exception raised when a wait did not end with success."""

    def __init__(self, message: str, *, description: str, attempts: int, outcome: Any) -> None:
        """Keep details about the wait that failed."""
        super().__init__(message)
        self.description = description
        self.attempts = attempts
        self.outcome = outcome


class WaitTimeoutError(WaitError):
    """An exception raised when the condition did not become true within the given attempts."""


class WaitFailureError(WaitError):
    """An exception raised when a terminal failure state was observed while waiting."""
