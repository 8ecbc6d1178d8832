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

"""Access OpenShift cluster using the oc binary and provision resources in it."""

from pathlib import Path
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Type
from typing import TypeVar
import json
import logging
import subprocess

import attr

from .config import OpenshiftConfiguration
from .exceptions import OCError
from .exceptions import TnbException
from .helpers import _subprocess_popen
from .helpers import _subprocess_run
from .objs import Build
from .objs import BuildConfig
from .objs import ConfigMap
from .objs import ImageStream
from .objs import InstallPlan
from .objs import Namespace
from .objs import OpenShiftObject
from .objs import OperatorGroup
from .objs import Pod
from .objs import Subscription
from .wait import WaitOutcome
from .wait import wait_for
from .wait import wait_for_either

_LOGGER = logging.getLogger(__name__)

_OBJ = TypeVar("_OBJ", bound=OpenShiftObject)

_INSTALL_PLAN_ATTEMPTS = 60
_IMAGE_STREAM_ATTEMPTS = 24
_POLL_INTERVAL_MS = 5000
# Upper bound on build duration, 10 minutes with the default poll interval.
_BUILD_ATTEMPTS = 120


@attr.s(slots=True)
class PortForward:
    """A running oc port-forward process."""

    process = attr.ib(type=Any)
    local_port = attr.ib(type=int)
    remote_port = attr.ib(type=int)

    def close(self) -> None:
        """Stop forwarding."""
        if self.process.poll() is not None:
            return

        self.process.terminate()
        try:
            self.process.wait(timeout=10)
        except subprocess.TimeoutExpired:
            _LOGGER.warning("Port-forward to port %d did not terminate, killing it", self.remote_port)
            self.process.kill()
            self.process.wait()


@attr.s(slots=True)
class OpenShiftClient:
    """A client for an OpenShift cluster bound to a namespace.

    The client is constructed explicitly and passed to whatever needs to talk
    to the cluster; its lifetime is the lifetime of the test run.
    """

    namespace = attr.ib(type=str)
    url = attr.ib(type=Optional[str], default=None)
    username = attr.ib(type=Optional[str], default=None)
    password = attr.ib(type=Optional[str], default=None, repr=False)
    deployment_label = attr.ib(type=str, default="app")
    _oc_checked = attr.ib(type=bool, default=False, init=False)

    @classmethod
    def from_configuration(cls, configuration: Optional[OpenshiftConfiguration] = None) -> "OpenShiftClient":
        """Create a client from configuration properties."""
        configuration = configuration or OpenshiftConfiguration()
        _LOGGER.debug("Creating new OpenShift client")
        return cls(
            namespace=configuration.openshift_namespace,
            url=configuration.openshift_url,
            username=configuration.openshift_username,
            password=configuration.openshift_password,
            deployment_label=configuration.openshift_deployment_label,
        )

    @staticmethod
    def oc_check() -> None:
        """Check if oc (OpenShift client binary) is available and if the user is logged in into the cluster."""
        try:
            oc_version = _subprocess_run(["oc", "version"], stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as exc:
            raise OCError(
                f"Failed to obtain information about OpenShift client - make sure oc is "
                f"installed and available on PATH: {str(exc)}"
            ) from exc

        if oc_version.returncode != 0:
            raise OCError(f"Failed to obtain information about OpenShift client: {oc_version.stderr}")

    def _oc(self, args: List[str], input: Optional[str] = None, namespaced: bool = True) -> Any:
        """Run oc with the given arguments, check oc binary on first use."""
        if not self._oc_checked:
            self.oc_check()
            self._oc_checked = True

        cmd = ["oc", *args]
        if namespaced:
            cmd.extend(("--namespace", self.namespace))

        return _subprocess_run(cmd, input=input, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    def login(self) -> None:
        """Log in to the configured cluster, the current oc context is kept if no URL is configured."""
        if not self.url:
            _LOGGER.debug("No OpenShift URL configured, using current oc context")
            return

        cmd = ["login", self.url]
        if self.username:
            cmd.extend(("--username", self.username))
        if self.password:
            cmd.extend(("--password", self.password))

        _LOGGER.info("Logging in to %r", self.url)
        subcommand = self._oc(cmd, namespaced=False)
        if subcommand.returncode != 0:
            raise OCError(f"Failed to log in to {self.url!r}: {subcommand.stderr}")

    def get(self, kind: str, name: str) -> Optional[Dict[str, Any]]:
        """Get the given object, None if it does not exist."""
        subcommand = self._oc(["get", kind, name, "-o", "json"])
        if subcommand.returncode != 0:
            if "NotFound" in subcommand.stderr:
                return None
            raise OCError(f"Failed to obtain {kind} {name!r} from namespace {self.namespace!r}: {subcommand.stderr}")

        result: Dict[str, Any] = json.loads(subcommand.stdout)
        return result

    def get_object(self, class_: Type[_OBJ], name: str) -> Optional[_OBJ]:
        """Get the given object wrapped, None if it does not exist."""
        raw = self.get(class_.resource_name(), name)
        if raw is None:
            return None
        return class_(raw=raw)

    def list(self, kind: str, selector: Optional[str] = None) -> List[Dict[str, Any]]:
        """List objects of the given kind, optionally filtered by a label selector."""
        cmd = ["get", kind, "-o", "json"]
        if selector:
            cmd.extend(("-l", selector))

        subcommand = self._oc(cmd)
        if subcommand.returncode != 0:
            raise OCError(f"Failed to list {kind} in namespace {self.namespace!r}: {subcommand.stderr}")

        return list(OpenShiftObject.iter_objects(json.loads(subcommand.stdout)))

    def apply(self, obj: OpenShiftObject) -> None:
        """Create the given object or replace it if it already exists."""
        _LOGGER.debug("Applying %s %r", obj.kind, obj.name)
        subcommand = self._oc(["apply", "-f", "-"], input=obj.to_yaml())
        if subcommand.returncode != 0:
            raise OCError(f"Failed to apply {obj.name!r} of kind {obj.kind!r}: {str(subcommand.stderr)}")

    def create(self, obj: OpenShiftObject) -> None:
        """Create the given object, fail if it exists."""
        _LOGGER.debug("Creating %s %r", obj.kind, obj.name)
        subcommand = self._oc(["create", "-f", "-"], input=obj.to_yaml())
        if subcommand.returncode != 0:
            raise OCError(f"Failed to create {obj.name!r} of kind {obj.kind!r}: {str(subcommand.stderr)}")

    def delete(self, kind: str, name: str) -> None:
        """Delete the given object, absent objects are ignored."""
        _LOGGER.debug("Deleting %s %r", kind, name)
        subcommand = self._oc(["delete", kind, name, "--ignore-not-found"])
        if subcommand.returncode != 0:
            raise OCError(f"Failed to delete {kind} {name!r} in namespace {self.namespace!r}: {subcommand.stderr}")

    def get_labeled_pods(self, label: str, value: str) -> List[Pod]:
        """Get pods labelled with the given label set to value."""
        return [Pod(raw=raw) for raw in self.list("pods", selector=f"{label}={value}")]

    def are_exactly_n_pods_ready(self, n: int, label: str, value: str) -> bool:
        """Check there are exactly n pods with the given label and all of them are ready."""
        pods = self.get_labeled_pods(label, value)
        return len(pods) == n and all(pod.is_ready() for pod in pods)

    def get_pod_log(self, name: str) -> str:
        """Get log of the pod run by the given deployment config."""
        subcommand = self._oc(["logs", f"dc/{name}"])
        if subcommand.returncode != 0:
            raise OCError(f"Failed to obtain log for {name!r} in namespace {self.namespace!r}: {subcommand.stderr}")

        result: str = subcommand.stdout
        return result

    def port_forward(self, service: str, remote_port: int, local_port: Optional[int] = None) -> PortForward:
        """Forward a local port to the given service port."""
        local_port = local_port or remote_port
        if not self._oc_checked:
            self.oc_check()
            self._oc_checked = True

        _LOGGER.debug("Creating port-forward to %s for port %d", service, remote_port)
        process = _subprocess_popen(
            [
                "oc",
                "port-forward",
                "--namespace",
                self.namespace,
                f"svc/{service}",
                f"{local_port}:{remote_port}",
            ],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
        return PortForward(process=process, local_port=local_port, remote_port=remote_port)

    def create_namespace(self, name: Optional[str] = None) -> None:
        """Create the given namespace, the client namespace if no name is given."""
        if name is None:
            name = self.namespace

        if not name:
            _LOGGER.info("Skipped creating namespace, name null or empty")
            return

        if self.get("namespace", name) is not None:
            _LOGGER.info("Skipped creating namespace %s, already exists", name)
            return

        self.create(Namespace.new(name))
        _LOGGER.info("Created namespace %s", name)

    def delete_namespace(self, name: Optional[str] = None) -> None:
        """Delete the given namespace, the client namespace if no name is given."""
        if name is None:
            name = self.namespace

        if not name:
            _LOGGER.info("Skipped deleting namespace, name null or empty")
            return

        if self.get("namespace", name) is None:
            _LOGGER.info("Skipped deleting namespace %s, not found", name)
            return

        self.delete("namespace", name)
        _LOGGER.info("Deleted namespace %s", name)

    def create_config_map(self, name: str, data: Dict[str, str]) -> None:
        """Create a config map with given name and data, replacing an existing one."""
        self.apply(ConfigMap.new(name, data))

    def create_subscription(self, channel: str, operator_name: str, source: str, subscription_name: str) -> None:
        """Create the operator group, unless one exists in the namespace, and the subscription."""
        _LOGGER.info(
            "Creating subscription with name %s, for operator %s, channel %s, source %s",
            subscription_name,
            operator_name,
            channel,
            source,
        )
        if not self.list(OperatorGroup.resource_name()):
            _LOGGER.debug("Creating operator group %s", subscription_name)
            self.apply(OperatorGroup.new(subscription_name, self.namespace))

        self.apply(Subscription.new(subscription_name, operator_name, channel, source))

    def _is_install_plan_complete(self, name: str) -> bool:
        subscription = self.get_object(Subscription, name)
        if subscription is None:
            return False

        install_plan_name = subscription.install_plan_name()
        if install_plan_name is None:
            return False

        install_plan = self.get_object(InstallPlan, install_plan_name)
        if install_plan is None:
            return False

        return install_plan.is_complete()

    def wait_for_completion(self, name: str) -> WaitOutcome:
        """Wait until the install plan for the given subscription completes."""
        return wait_for(
            lambda: self._is_install_plan_complete(name),
            _INSTALL_PLAN_ATTEMPTS,
            _POLL_INTERVAL_MS,
            f"Waiting until the install plan from subscription {name} is complete",
        )

    def delete_subscription(self, name: str) -> None:
        """Delete the subscription together with the cluster service version it installed."""
        _LOGGER.info("Deleting subscription %s", name)
        subscription = self.get_object(Subscription, name)
        if subscription is None:
            raise TnbException(f"Subscription {name!r} not found in namespace {self.namespace!r}")

        # A subscription created over a left-over CSV has none.
        csv_name = subscription.current_csv()
        if csv_name is not None:
            self.delete("clusterserviceversions.operators.coreos.com", csv_name)

        self.delete(Subscription.resource_name(), name)

    def _image_stream_has_tag(self, name: str, tag: str) -> bool:
        image_stream = self.get_object(ImageStream, name)
        return image_stream is not None and image_stream.has_tag(tag)

    def wait_for_image_stream(self, name: str, tag: str) -> WaitOutcome:
        """Wait until the image stream is populated with the given tag."""
        return wait_for(
            lambda: self._image_stream_has_tag(name, tag),
            _IMAGE_STREAM_ATTEMPTS,
            _POLL_INTERVAL_MS,
            f"Waiting until the imagestream {name} contains {tag} tag",
        )

    def _last_build(self, name: str) -> Optional[Build]:
        build_config = self.get_object(BuildConfig, name)
        if build_config is None:
            return None

        build_name = build_config.last_build_name()
        if build_name is None:
            return None

        return self.get_object(Build, build_name)

    def _is_last_build_in_phase(self, name: str, phase: str) -> bool:
        build = self._last_build(name)
        return build is not None and build.is_phase(phase)

    def start_build(self, name: str, file_path: Path) -> None:
        """Instantiate a new binary build for the given build config."""
        _LOGGER.info("Instantiating a new build for buildconfig %s from file %s", name, file_path.absolute())
        subcommand = self._oc(["start-build", name, f"--from-file={file_path.absolute()}"])
        if subcommand.returncode != 0:
            raise OCError(f"Failed to start build {name!r} in namespace {self.namespace!r}: {subcommand.stderr}")

    def do_s2i_build(self, name: str, file_path: Path, max_attempts: Optional[int] = _BUILD_ATTEMPTS) -> WaitOutcome:
        """Start a new s2i build from the given file and wait until it completes or fails."""
        self.start_build(name, file_path)

        _LOGGER.info("Waiting until the build completes")
        return wait_for_either(
            lambda: self._is_last_build_in_phase(name, "complete"),
            lambda: self._is_last_build_in_phase(name, "failed"),
            _POLL_INTERVAL_MS,
            f"Waiting until the build {name} completes",
            max_attempts=max_attempts,
        )
