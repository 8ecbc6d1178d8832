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

"""Helpers used in tnb-openshift library."""

from typing import Any
from typing import List
import logging
import subprocess

_LOGGER = logging.getLogger(__name__)

# Arguments following these are not logged.
_SECRET_FLAGS = frozenset(("-p", "--password", "--token"))


def _mask_secrets(args: List[str]) -> List[str]:
    """Replace values of secret flags so that they do not end up in logs."""
    result = list(args)
    for idx, arg in enumerate(result[:-1]):
        if arg in _SECRET_FLAGS:
            result[idx + 1] = "***"
    return result


def _subprocess_run(args: List[str], **kwargs: Any) -> Any:
    """Run the given command as a subprocess - a thin wrapper."""
    _LOGGER.debug("Executing command %r", _mask_secrets(args))
    return subprocess.run(args, universal_newlines=True, **kwargs)


def _subprocess_popen(args: List[str], **kwargs: Any) -> Any:
    """Start the given command as a long running subprocess."""
    _LOGGER.debug("Starting command %r", _mask_secrets(args))
    return subprocess.Popen(args, universal_newlines=True, **kwargs)
