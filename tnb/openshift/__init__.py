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

"""Provision and tear down service dependencies of tests in an OpenShift cluster."""

__version__ = "0.1.0"
__author__ = "tnb-openshift contributors"

from .client import OpenShiftClient
from .client import PortForward
from .config import Configuration
from .config import OpenshiftConfiguration
from .config import SystemXConfiguration
from .config import TestConfiguration
from .deployment import Deployable
from .deployment import OpenshiftDeployable
from .deployment import ServiceRegistry
from .deployment import registry
from .exceptions import ConfigurationError
from .exceptions import OCError
from .exceptions import ServiceNotFound
from .exceptions import TnbException
from .exceptions import WaitError
from .exceptions import WaitFailureError
from .exceptions import WaitTimeoutError
from .wait import WaitOutcome
from .wait import WaitSpec
from .wait import wait_for
from .wait import wait_for_either
from . import services
