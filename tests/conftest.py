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

"""Fixtures shared across the test-suite."""

import pytest

from tnb.openshift import wait
from tnb.openshift.client import OpenShiftClient

from base import OcStub


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Make sure properties of the machine running tests do not leak in."""
    for name in ("TNB_PROPERTIES", "TEST_USE_OPENSHIFT", "OPENSHIFT_URL", "OPENSHIFT_NAMESPACE", "MONGODB_IMAGE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    """Record sleeps done while waiting instead of sleeping."""
    recorded = []
    monkeypatch.setattr(wait.time, "sleep", recorded.append)
    return recorded


@pytest.fixture
def oc(monkeypatch):
    """Replace oc binary invocations with a stub."""
    stub = OcStub()
    monkeypatch.setattr("tnb.openshift.client._subprocess_run", stub)
    return stub


@pytest.fixture
def client(oc):
    """A client bound to the test namespace talking to the oc stub."""
    return OpenShiftClient(namespace="tnb-tests")
