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
# type: ignore

"""A base class and helpers shared across the test-suite."""

import copy
import json
import os
import subprocess
from typing import Any
from typing import Dict
from typing import List
from typing import Tuple


class TnbTestCase:
    """A base class for tnb-openshift test cases."""

    data_dir = os.path.join(os.path.dirname(os.path.realpath(__file__)), "data")

    @classmethod
    def load_json(cls, name: str) -> Dict[str, Any]:
        """Load a JSON document from the data directory, a fresh copy on each call."""
        with open(os.path.join(cls.data_dir, name), "r") as input_file:
            return copy.deepcopy(json.load(input_file))


class OcStub:
    """Stand in for oc binary invocations.

    Responses are registered for an argument prefix (arguments following
    ``oc``). The longest matching prefix wins. When more responses are
    registered for the same prefix, they are returned in order and the last
    one is kept for any further call.
    """

    def __init__(self) -> None:
        """Create a stub answering oc version successfully."""
        self.calls: List[Tuple[List[str], Dict[str, Any]]] = []
        self._responses: Dict[Tuple[str, ...], List[subprocess.CompletedProcess]] = {}
        self.respond("version", stdout="Client Version: 4.14.0")

    def respond(self, *prefix: str, returncode: int = 0, stdout: Any = "", stderr: str = "") -> None:
        """Register a response for oc invocations starting with the given arguments."""
        if not isinstance(stdout, str):
            stdout = json.dumps(stdout)

        self._responses.setdefault(tuple(prefix), []).append(
            subprocess.CompletedProcess(args=["oc", *prefix], returncode=returncode, stdout=stdout, stderr=stderr)
        )

    def not_found(self, *prefix: str) -> None:
        """Register a NotFound error for the given prefix."""
        self.respond(
            *prefix,
            returncode=1,
            stderr=f'Error from server (NotFound): {prefix[1] if len(prefix) > 1 else "object"} not found',
        )

    def __call__(self, args: List[str], **kwargs: Any) -> subprocess.CompletedProcess:
        """Record the call and answer with the registered response."""
        self.calls.append((list(args), kwargs))
        oc_args = tuple(args[1:])

        best = None
        for prefix in self._responses:
            if oc_args[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix

        if best is None:
            return subprocess.CompletedProcess(args=args, returncode=0, stdout="", stderr="")

        queue = self._responses[best]
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    def commands(self, *prefix: str) -> List[List[str]]:
        """Get recorded oc invocations starting with the given arguments, oc itself stripped."""
        return [args[1:] for args, _ in self.calls if tuple(args[1 : 1 + len(prefix)]) == prefix]

    def inputs(self, *prefix: str) -> List[str]:
        """Get standard input passed to oc invocations starting with the given arguments."""
        return [kwargs.get("input") for args, kwargs in self.calls if tuple(args[1 : 1 + len(prefix)]) == prefix]
