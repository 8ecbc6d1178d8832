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

"""MongoDB replica set deployed as a test dependency."""

from typing import Dict
from typing import Optional
import logging

import attr

from ..client import OpenShiftClient
from ..client import PortForward
from ..config import SystemXConfiguration
from ..deployment import Deployable
from ..deployment import OpenshiftDeployable
from ..deployment import registry
from ..objs import DeploymentConfig
from ..objs import Service
from ..wait import wait_for

_LOGGER = logging.getLogger(__name__)

_READY_LOG_MESSAGE = "Transition to primary complete; database writes are now permitted"
_UNDEPLOY_ATTEMPTS = 120
_UNDEPLOY_INTERVAL_MS = 1000


@attr.s(slots=True, frozen=True)
class MongoDBAccount:
    """Credentials and database created in MongoDB."""

    username = attr.ib(type=str, default="user")
    password = attr.ib(type=str, default="user", repr=False)
    database = attr.ib(type=str, default="sampledb")
    admin_password = attr.ib(type=str, default="admin", repr=False)
    replica_set_name = attr.ib(type=str, default="rs0")
    replica_set_key = attr.ib(type=str, default="replica", repr=False)


class MongoDB(Deployable):
    """MongoDB service regardless of where it is deployed."""

    port = 27017

    def __init__(self, account: Optional[MongoDBAccount] = None, image: Optional[str] = None) -> None:
        """Set up account and image used for MongoDB."""
        self.account = account or MongoDBAccount()
        self.image = image or SystemXConfiguration().mongodb_image

    @property
    def name(self) -> str:
        return "mongodb"

    def container_environment(self) -> Dict[str, str]:
        """Environment variables configuring MongoDB container."""
        return {
            "MONGODB_USER": self.account.username,
            "MONGODB_PASSWORD": self.account.password,
            "MONGODB_DATABASE": self.account.database,
            "MONGODB_ADMIN_PASSWORD": self.account.admin_password,
            "MONGODB_REPLICA_NAME": self.account.replica_set_name,
            "MONGODB_KEYFILE_VALUE": self.account.replica_set_key,
        }

    def replica_set_url(self, host: Optional[str] = None) -> str:
        """Connection URL of the replica set, host defaults to the service name."""
        return (
            f"mongodb://{self.account.username}:{self.account.password}"
            f"@{host or self.name}:{self.port}/{self.account.database}"
        )


@registry.register("mongodb", "openshift")
class OpenshiftMongoDB(MongoDB, OpenshiftDeployable):
    """MongoDB deployed to OpenShift as a deployment config with a service."""

    def __init__(
        self,
        client: OpenShiftClient,
        account: Optional[MongoDBAccount] = None,
        image: Optional[str] = None,
    ) -> None:
        """Bind MongoDB to the given cluster client."""
        MongoDB.__init__(self, account=account, image=image)
        OpenshiftDeployable.__init__(self, client)
        self._port_forward: Optional[PortForward] = None

    def create(self) -> None:
        """Create deployment config and service for MongoDB."""
        _LOGGER.info("Deploying OpenShift MongoDB")
        label = self.client.deployment_label
        ports = [{"name": "mongodb", "containerPort": self.port, "protocol": "TCP"}]

        _LOGGER.debug("Creating deploymentconfig %s", self.name)
        self.client.apply(
            DeploymentConfig.new(
                self.name,
                image=self.image,
                label=label,
                ports=ports,
                env=self.container_environment(),
            )
        )

        _LOGGER.debug("Creating service %s", self.name)
        self.client.apply(Service.new(self.name, label=label, port=self.port))

    def undeploy(self) -> None:
        """Close port-forward, delete resources and wait until no pod is left."""
        _LOGGER.info("Undeploying OpenShift MongoDB")
        if self._port_forward is not None:
            _LOGGER.debug("Closing port-forward")
            self._port_forward.close()
            self._port_forward = None

        _LOGGER.debug("Deleting service %s", self.name)
        self.client.delete("service", self.name)
        _LOGGER.debug("Deleting deploymentconfig %s", self.name)
        self.client.delete("deploymentconfig", self.name)

        wait_for(
            lambda: self.client.are_exactly_n_pods_ready(0, self.client.deployment_label, self.name),
            _UNDEPLOY_ATTEMPTS,
            _UNDEPLOY_INTERVAL_MS,
            f"Waiting until pods of {self.name} are removed",
        )

    def is_ready(self) -> bool:
        """Check a single pod is ready and MongoDB became the primary."""
        return self.client.are_exactly_n_pods_ready(
            1, self.client.deployment_label, self.name
        ) and _READY_LOG_MESSAGE in self.client.get_pod_log(self.name)

    def is_deployed(self) -> bool:
        return len(self.client.get_labeled_pods(self.client.deployment_label, self.name)) != 0

    def port_forward(self) -> PortForward:
        """Forward MongoDB port to localhost, reuse an already opened forward."""
        if self._port_forward is None:
            self._port_forward = self.client.port_forward(self.name, self.port)
        return self._port_forward

    def local_url(self) -> str:
        """Replica set URL reachable through the port-forward."""
        self.port_forward()
        return self.replica_set_url(host="localhost")
