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

"""Routines needed for constructing and inspecting OpenShift objects."""

import logging
import yaml
from typing import Any
from typing import Dict
from typing import Generator
from typing import List
from typing import Optional
from typing import Union

import attr

_LOGGER = logging.getLogger(__name__)

_MARKETPLACE_NAMESPACE = "openshift-marketplace"


@attr.s(slots=True)
class OpenShiftObject:
    """A wrapper for OpenShift object representation."""

    raw = attr.ib(type=Dict[str, Any])

    kind = ""
    api_version = "v1"
    # Resource name used with oc, kind in lowercase if not set.
    resource = ""

    @classmethod
    def _new(cls, name: str, spec: Optional[Dict[str, Any]] = None, labels: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Create raw representation of an object of this kind."""
        raw: Dict[str, Any] = {
            "apiVersion": cls.api_version,
            "kind": cls.kind,
            "metadata": {"name": name},
        }
        if labels:
            raw["metadata"]["labels"] = dict(labels)
        if spec is not None:
            raw["spec"] = spec
        return raw

    @classmethod
    def resource_name(cls) -> str:
        return cls.resource or cls.kind.lower()

    @classmethod
    def iter_objects(
        cls, content: Union[Dict[str, Any], List[Dict[str, Any]]]
    ) -> Generator[Dict[str, Any], None, None]:
        """Iterate over objects found in oc output, lists are flattened."""
        if isinstance(content, list):
            for item in content:
                if isinstance(item, (dict, list)):
                    yield from cls.iter_objects(item)
            return

        if content.get("kind", "").strip().lower() == "list" or content.get("kind", "").endswith("List"):
            for obj in content.get("items", []):
                yield from cls.iter_objects(obj)
            return

        yield content

    def labels(self) -> Dict[str, str]:
        """Get labels applied to the object."""
        result: Dict[str, str] = self.raw.get("metadata", {}).get("labels", {})
        return result

    @property
    def name(self) -> str:
        """Get name of this object."""
        result: str = self.raw["metadata"]["name"]
        return result

    def status(self) -> Dict[str, Any]:
        """Get status of the object, empty if not reported yet."""
        result: Dict[str, Any] = self.raw.get("status") or {}
        return result

    def to_yaml(self) -> str:
        """Convert the current object to its YAML representation."""
        result: str = yaml.safe_dump(self.raw)
        return result


@attr.s(slots=True)
class Namespace(OpenShiftObject):
    """A wrapper for Namespace representation."""

    kind = "Namespace"

    @classmethod
    def new(cls, name: str) -> "Namespace":
        """Create a new namespace object."""
        return cls(raw=cls._new(name))


@attr.s(slots=True)
class ConfigMap(OpenShiftObject):
    """A wrapper for ConfigMap representation."""

    kind = "ConfigMap"

    @classmethod
    def new(cls, name: str, data: Dict[str, str]) -> "ConfigMap":
        """Create a config map holding the given data."""
        raw = cls._new(name)
        raw["data"] = dict(data)
        return cls(raw=raw)


@attr.s(slots=True)
class OperatorGroup(OpenShiftObject):
    """A wrapper for OperatorGroup representation."""

    kind = "OperatorGroup"
    api_version = "operators.coreos.com/v1"
    resource = "operatorgroups.operators.coreos.com"

    @classmethod
    def new(cls, name: str, target_namespace: str) -> "OperatorGroup":
        """Create an operator group targeting the given namespace."""
        return cls(raw=cls._new(name, spec={"targetNamespaces": [target_namespace]}))


@attr.s(slots=True)
class Subscription(OpenShiftObject):
    """A wrapper for operator Subscription representation."""

    kind = "Subscription"
    api_version = "operators.coreos.com/v1alpha1"
    resource = "subscriptions.operators.coreos.com"

    @classmethod
    def new(cls, name: str, operator_name: str, channel: str, source: str) -> "Subscription":
        """Create a subscription to the given operator from a marketplace catalog source."""
        spec = {
            "name": operator_name,
            "channel": channel,
            "source": source,
            "sourceNamespace": _MARKETPLACE_NAMESPACE,
        }
        return cls(raw=cls._new(name, spec=spec))

    def install_plan_name(self) -> Optional[str]:
        """Get name of the install plan, None if not created yet."""
        install_plan = self.status().get("installplan") or self.status().get("installPlanRef") or {}
        result: Optional[str] = install_plan.get("name")
        return result

    def current_csv(self) -> Optional[str]:
        """Get name of the cluster service version installed by this subscription."""
        result: Optional[str] = self.status().get("currentCSV")
        return result


@attr.s(slots=True)
class InstallPlan(OpenShiftObject):
    """A wrapper for operator InstallPlan representation."""

    kind = "InstallPlan"
    api_version = "operators.coreos.com/v1alpha1"
    resource = "installplans.operators.coreos.com"

    def phase(self) -> Optional[str]:
        result: Optional[str] = self.status().get("phase")
        return result

    def is_complete(self) -> bool:
        """Check if the install plan finished installing."""
        phase = self.phase()
        return phase is not None and phase.lower() == "complete"


@attr.s(slots=True)
class ImageStream(OpenShiftObject):
    """A wrapper for ImageStream representation."""

    kind = "ImageStream"
    api_version = "image.openshift.io/v1"

    def tag_names(self) -> List[str]:
        """Get names of tags stated in the image stream spec."""
        tags = (self.raw.get("spec") or {}).get("tags") or []
        return [tag["name"] for tag in tags if tag.get("name")]

    def has_tag(self, tag: str) -> bool:
        return tag in self.tag_names()


@attr.s(slots=True)
class BuildConfig(OpenShiftObject):
    """A wrapper for BuildConfig representation."""

    kind = "BuildConfig"
    api_version = "build.openshift.io/v1"

    def last_version(self) -> Optional[int]:
        """Get number of the last build instantiated, None if no build was triggered."""
        result: Optional[int] = self.status().get("lastVersion")
        return result

    def last_build_name(self) -> Optional[str]:
        """Get name of the build instantiated last."""
        last_version = self.last_version()
        if not last_version:
            return None
        return f"{self.name}-{last_version}"


@attr.s(slots=True)
class Build(OpenShiftObject):
    """A wrapper for Build representation."""

    kind = "Build"
    api_version = "build.openshift.io/v1"

    def phase(self) -> Optional[str]:
        result: Optional[str] = self.status().get("phase")
        return result

    def is_phase(self, phase: str) -> bool:
        """Check the build phase, case insensitive."""
        current = self.phase()
        return current is not None and current.lower() == phase.lower()


@attr.s(slots=True)
class Pod(OpenShiftObject):
    """A wrapper for Pod representation."""

    kind = "Pod"

    def is_ready(self) -> bool:
        """Check if the pod reports Ready condition."""
        for condition in self.status().get("conditions") or []:
            if condition.get("type") == "Ready":
                return str(condition.get("status")).lower() == "true"
        return False


@attr.s(slots=True)
class DeploymentConfig(OpenShiftObject):
    """A wrapper for DeploymentConfig representation."""

    kind = "DeploymentConfig"
    api_version = "apps.openshift.io/v1"

    @classmethod
    def new(
        cls,
        name: str,
        image: str,
        label: str,
        ports: List[Dict[str, Any]],
        env: Dict[str, str],
        replicas: int = 1,
    ) -> "DeploymentConfig":
        """Create a deployment config running a single container redeployed on config change."""
        labels = {label: name}
        spec = {
            "replicas": replicas,
            "selector": dict(labels),
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": {
                    "containers": [
                        {
                            "name": name,
                            "image": image,
                            "ports": ports,
                            "env": [{"name": key, "value": value} for key, value in env.items()],
                        }
                    ]
                },
            },
            "triggers": [{"type": "ConfigChange"}],
        }
        return cls(raw=cls._new(name, spec=spec, labels=labels))


@attr.s(slots=True)
class Service(OpenShiftObject):
    """A wrapper for Service representation."""

    kind = "Service"

    @classmethod
    def new(cls, name: str, label: str, port: int) -> "Service":
        """Create a service exposing the given port of pods labelled with name."""
        labels = {label: name}
        spec = {
            "selector": dict(labels),
            "ports": [{"name": name, "port": port, "targetPort": port}],
        }
        return cls(raw=cls._new(name, spec=spec, labels=labels))
