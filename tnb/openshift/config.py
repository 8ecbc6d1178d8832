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

"""Configuration properties used when provisioning services.

Properties are dotted keys such as ``openshift.namespace``. A value is taken
from the explicitly provided mapping, then from a YAML file pointed to by
``TNB_PROPERTIES`` and finally from an environment variable derived from the
key (``OPENSHIFT_NAMESPACE``).
"""

from typing import Any
from typing import Dict
from typing import Optional
import logging
import os

import attr
import yaml

from .exceptions import ConfigurationError

_LOGGER = logging.getLogger(__name__)

_PROPERTIES_FILE_ENV = "TNB_PROPERTIES"
_TRUE_VALUES = frozenset(("1", "true", "yes", "on"))
_FALSE_VALUES = frozenset(("0", "false", "no", "off", ""))


def load_properties_file(path: str) -> Dict[str, str]:
    """Load a flat mapping of properties from a YAML file."""
    _LOGGER.debug("Loading configuration properties from %r", path)
    try:
        with open(path, "r") as input_file:
            content = yaml.safe_load(input_file)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to load configuration properties from {path!r}: {str(exc)}") from exc

    if content is None:
        return {}

    if not isinstance(content, dict):
        raise ConfigurationError(f"File {path!r} does not hold a mapping of configuration properties")

    return {str(key): str(value) for key, value in content.items() if value is not None}


def _default_properties() -> Dict[str, str]:
    path = os.getenv(_PROPERTIES_FILE_ENV)
    if not path:
        return {}
    return load_properties_file(path)


def _env_name(key: str) -> str:
    return key.upper().replace(".", "_").replace("-", "_")


@attr.s(slots=True)
class Configuration:
    """Lookup of configuration properties."""

    properties = attr.ib(type=Dict[str, str], factory=_default_properties)

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get value of the given property, default if not set anywhere."""
        if key in self.properties:
            return self.properties[key]

        value = os.getenv(_env_name(key))
        if value is not None:
            return value

        return default

    def get_required(self, key: str) -> str:
        """Get value of the given property, raise if not set."""
        value = self.get_property(key)
        if value is None:
            raise ConfigurationError(
                f"Configuration property {key!r} is not set, provide it in properties "
                f"or as environment variable {_env_name(key)!r}"
            )
        return value

    def get_boolean(self, key: str, default: bool = False) -> bool:
        """Get boolean value of the given property."""
        value = self.get_property(key)
        if value is None:
            return default

        value = value.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False

        raise ConfigurationError(f"Configuration property {key!r} is not a boolean: {value!r}")

    def get_integer(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Get integer value of the given property."""
        value = self.get_property(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError as exc:
            raise ConfigurationError(f"Configuration property {key!r} is not an integer: {value!r}") from exc

    def to_dict(self) -> Dict[str, Any]:
        """Get explicitly provided properties, secrets masked."""
        return {key: ("***" if "password" in key else value) for key, value in self.properties.items()}


@attr.s(slots=True)
class OpenshiftConfiguration(Configuration):
    """Properties describing the OpenShift cluster to connect to."""

    URL = "openshift.url"
    NAMESPACE = "openshift.namespace"
    USERNAME = "openshift.username"
    PASSWORD = "openshift.password"
    DEPLOYMENT_LABEL = "openshift.deployment.label"

    @property
    def openshift_url(self) -> Optional[str]:
        """Cluster API URL, the current oc context is used if not set."""
        return self.get_property(self.URL)

    @property
    def openshift_namespace(self) -> str:
        """Namespace the services are deployed to."""
        return self.get_required(self.NAMESPACE)

    @property
    def openshift_username(self) -> Optional[str]:
        return self.get_property(self.USERNAME)

    @property
    def openshift_password(self) -> Optional[str]:
        return self.get_property(self.PASSWORD)

    @property
    def openshift_deployment_label(self) -> str:
        """Label key put on every deployed resource."""
        result: str = self.get_property(self.DEPLOYMENT_LABEL, "app")  # type: ignore
        return result


@attr.s(slots=True)
class TestConfiguration(Configuration):
    """Properties driving the test run itself."""

    # Not a test class.
    __test__ = False

    USE_OPENSHIFT = "test.use.openshift"

    @property
    def use_openshift(self) -> bool:
        return self.get_boolean(self.USE_OPENSHIFT, True)

    @property
    def backend(self) -> str:
        """Backend tag used to pick service implementations."""
        return "openshift" if self.use_openshift else "local"


@attr.s(slots=True)
class SystemXConfiguration(Configuration):
    """Properties of system-x services."""

    MONGODB_IMAGE = "mongodb.image"

    @property
    def mongodb_image(self) -> str:
        result: str = self.get_property(self.MONGODB_IMAGE, "registry.redhat.io/rhscl/mongodb-36-rhel7:latest")  # type: ignore
        return result
