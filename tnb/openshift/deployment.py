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

"""Services deployable for a test run and a registry of their implementations."""

from abc import ABC
from abc import abstractmethod
from typing import Any
from typing import Callable
from typing import Dict
from typing import Optional
from typing import Tuple
from typing import Type
from typing import TypeVar
import logging

from .client import OpenShiftClient
from .config import TestConfiguration
from .exceptions import ServiceNotFound
from .wait import wait_for

_LOGGER = logging.getLogger(__name__)

_DEPLOYABLE = TypeVar("_DEPLOYABLE", bound=Type["Deployable"])

_READY_ATTEMPTS = 60
_READY_INTERVAL_MS = 5000


class Deployable(ABC):
    """A service that can be deployed before and undeployed after tests."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the service, used for naming resources."""

    @abstractmethod
    def create(self) -> None:
        """Create all resources needed by the service."""

    @abstractmethod
    def undeploy(self) -> None:
        """Remove the service and resources it created."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Check if the service accepts requests."""

    @abstractmethod
    def is_deployed(self) -> bool:
        """Check if resources of the service exist."""

    def deploy(self) -> None:
        """Create the service unless deployed and wait until it is ready."""
        if self.is_deployed():
            _LOGGER.info("Service %s is already deployed", self.name)
        else:
            self.create()

        wait_for(
            self.is_ready,
            _READY_ATTEMPTS,
            _READY_INTERVAL_MS,
            f"Waiting until service {self.name} is ready",
        )
        _LOGGER.info("Service %s is ready", self.name)

    def __enter__(self) -> "Deployable":
        try:
            self.deploy()
        except Exception:
            _LOGGER.error("Deploying service %s failed, removing it", self.name)
            self.undeploy()
            raise
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.undeploy()


class OpenshiftDeployable(Deployable):
    """A service deployed to OpenShift."""

    def __init__(self, client: OpenShiftClient) -> None:
        """Bind the service to the given cluster client."""
        self.client = client


class ServiceRegistry:
    """Map a service and a backend tag to an implementation class."""

    def __init__(self) -> None:
        """Create an empty registry."""
        self._services: Dict[Tuple[str, str], Type[Deployable]] = {}

    def register(self, service: str, backend: str) -> Callable[[_DEPLOYABLE], _DEPLOYABLE]:
        """Register the decorated class as implementation of service on the given backend."""

        def wrapper(class_: _DEPLOYABLE) -> _DEPLOYABLE:
            key = (service, backend)
            if key in self._services and self._services[key] is not class_:
                raise ValueError(
                    f"Service {service!r} already has an implementation for backend {backend!r}: "
                    f"{self._services[key].__name__}"
                )

            _LOGGER.debug("Registering %s as %r for backend %r", class_.__name__, service, backend)
            self._services[key] = class_
            return class_

        return wrapper

    def resolve(self, service: str, backend: Optional[str] = None) -> Type[Deployable]:
        """Get implementation of service, backend defaults to the one configured for the test run."""
        if backend is None:
            backend = TestConfiguration().backend

        try:
            return self._services[(service, backend)]
        except KeyError as exc:
            raise ServiceNotFound(
                f"No implementation of service {service!r} for backend {backend!r}, "
                f"available: {sorted(self._services)}"
            ) from exc

    def create(self, service: str, *args: Any, backend: Optional[str] = None, **kwargs: Any) -> Deployable:
        """Instantiate implementation of the given service."""
        return self.resolve(service, backend)(*args, **kwargs)

    def services(self) -> Dict[Tuple[str, str], Type[Deployable]]:
        return dict(self._services)


registry = ServiceRegistry()
