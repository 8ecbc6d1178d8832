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

"""A test-suite for the OpenShift client and provisioning routines."""

import subprocess
from pathlib import Path

import pytest
import yaml
from flexmock import flexmock

from tnb.openshift.client import OpenShiftClient
from tnb.openshift.client import PortForward
from tnb.openshift.config import OpenshiftConfiguration
from tnb.openshift.exceptions import ConfigurationError
from tnb.openshift.exceptions import OCError
from tnb.openshift.exceptions import TnbException
from tnb.openshift.exceptions import WaitFailureError
from tnb.openshift.exceptions import WaitTimeoutError
from tnb.openshift.wait import WaitOutcome

from base import TnbTestCase

_SUBSCRIPTION = "subscriptions.operators.coreos.com"
_INSTALL_PLAN = "installplans.operators.coreos.com"
_OPERATOR_GROUP = "operatorgroups.operators.coreos.com"


class TestClientBasics(TnbTestCase):
    """Test generic resource operations."""

    def test_from_configuration(self) -> None:
        configuration = OpenshiftConfiguration(
            properties={
                "openshift.namespace": "tnb-tests",
                "openshift.url": "https://api.example.com:6443",
                "openshift.username": "developer",
                "openshift.password": "secret",
            }
        )
        client = OpenShiftClient.from_configuration(configuration)
        assert client.namespace == "tnb-tests"
        assert client.url == "https://api.example.com:6443"
        assert client.deployment_label == "app"
        assert "secret" not in repr(client)

    def test_from_configuration_no_namespace(self) -> None:
        with pytest.raises(ConfigurationError):
            OpenShiftClient.from_configuration(OpenshiftConfiguration(properties={}))

    def test_get(self, client, oc) -> None:
        oc.respond("get", "imagestream", "my-app", stdout=self.load_json("imagestream.json"))

        result = client.get("imagestream", "my-app")

        assert result["metadata"]["name"] == "my-app"
        assert oc.commands("get") == [["get", "imagestream", "my-app", "-o", "json", "--namespace", "tnb-tests"]]

    def test_get_not_found(self, client, oc) -> None:
        oc.not_found("get", "imagestream", "my-app")
        assert client.get("imagestream", "my-app") is None

    def test_get_error(self, client, oc) -> None:
        oc.respond("get", "imagestream", returncode=1, stderr="error: You must be logged in to the server (Unauthorized)")
        with pytest.raises(OCError, match="Unauthorized"):
            client.get("imagestream", "my-app")

    def test_oc_checked_once(self, client, oc) -> None:
        oc.respond("get", "pod", stdout={"kind": "Pod", "metadata": {"name": "a"}})
        client.get("pod", "a")
        client.get("pod", "b")
        assert len(oc.commands("version")) == 1

    def test_oc_missing(self, client, monkeypatch) -> None:
        def _missing(args, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", "oc")

        monkeypatch.setattr("tnb.openshift.client._subprocess_run", _missing)
        with pytest.raises(OCError, match="make sure oc is installed"):
            client.get("pod", "a")

    def test_list(self, client, oc) -> None:
        oc.respond("get", "pods", stdout=self.load_json("pods.json"))

        pods = client.get_labeled_pods("app", "mongodb")

        assert [pod.name for pod in pods] == ["mongodb-1-8xkzq", "mongodb-1-deploy"]
        assert oc.commands("get", "pods") == [
            ["get", "pods", "-o", "json", "-l", "app=mongodb", "--namespace", "tnb-tests"]
        ]

    def test_list_error(self, client, oc) -> None:
        oc.respond("get", "pods", returncode=1, stderr="forbidden")
        with pytest.raises(OCError):
            client.list("pods")

    @pytest.mark.parametrize(
        "items,n,expected",
        [
            ([], 0, True),
            ([], 1, False),
            (["ready"], 1, True),
            (["not-ready"], 1, False),
            (["ready", "ready"], 1, False),
        ],
    )
    def test_are_exactly_n_pods_ready(self, client, oc, items, n, expected) -> None:
        pods = self.load_json("pods.json")["items"]
        by_state = {"ready": pods[0], "not-ready": pods[1]}
        oc.respond("get", "pods", stdout={"kind": "List", "items": [by_state[item] for item in items]})

        assert client.are_exactly_n_pods_ready(n, "app", "mongodb") is expected

    def test_apply(self, client, oc) -> None:
        client.create_config_map("settings", {"key": "value"})

        assert oc.commands("apply") == [["apply", "-f", "-", "--namespace", "tnb-tests"]]
        applied = yaml.safe_load(oc.inputs("apply")[0])
        assert applied["kind"] == "ConfigMap"
        assert applied["data"] == {"key": "value"}

    def test_apply_error(self, client, oc) -> None:
        oc.respond("apply", returncode=1, stderr="invalid object")
        with pytest.raises(OCError, match="settings"):
            client.create_config_map("settings", {})

    def test_delete(self, client, oc) -> None:
        client.delete("service", "mongodb")
        assert oc.commands("delete") == [["delete", "service", "mongodb", "--ignore-not-found", "--namespace", "tnb-tests"]]

    def test_pod_log(self, client, oc) -> None:
        oc.respond("logs", "dc/mongodb", stdout="waiting for connections")
        assert client.get_pod_log("mongodb") == "waiting for connections"

    def test_login(self, oc) -> None:
        client = OpenShiftClient(
            namespace="tnb-tests", url="https://api.example.com:6443", username="developer", password="secret"
        )
        client.login()
        assert oc.commands("login") == [
            ["login", "https://api.example.com:6443", "--username", "developer", "--password", "secret"]
        ]

    def test_login_current_context(self, client, oc) -> None:
        client.login()
        assert oc.commands("login") == []

    def test_login_error(self, oc) -> None:
        oc.respond("login", returncode=1, stderr="Login failed (401 Unauthorized)")
        with pytest.raises(OCError, match="401"):
            OpenShiftClient(namespace="tnb-tests", url="https://api.example.com:6443").login()


class TestNamespace(TnbTestCase):
    """Test namespace management."""

    def test_create(self, client, oc) -> None:
        oc.not_found("get", "namespace", "tnb-tests")

        client.create_namespace()

        assert oc.commands("create") == [["create", "-f", "-", "--namespace", "tnb-tests"]]
        assert yaml.safe_load(oc.inputs("create")[0])["metadata"]["name"] == "tnb-tests"

    def test_create_named(self, client, oc) -> None:
        oc.not_found("get", "namespace", "other")
        client.create_namespace("other")
        assert yaml.safe_load(oc.inputs("create")[0])["metadata"]["name"] == "other"

    def test_create_exists(self, client, oc) -> None:
        oc.respond("get", "namespace", "tnb-tests", stdout={"kind": "Namespace", "metadata": {"name": "tnb-tests"}})
        client.create_namespace()
        assert oc.commands("create") == []

    def test_create_empty_name(self, client, oc) -> None:
        client.create_namespace("")
        assert oc.calls == []

    def test_delete(self, client, oc) -> None:
        oc.respond("get", "namespace", "tnb-tests", stdout={"kind": "Namespace", "metadata": {"name": "tnb-tests"}})
        client.delete_namespace()
        assert oc.commands("delete") == [["delete", "namespace", "tnb-tests", "--ignore-not-found", "--namespace", "tnb-tests"]]

    def test_delete_not_found(self, client, oc) -> None:
        oc.not_found("get", "namespace", "tnb-tests")
        client.delete_namespace()
        assert oc.commands("delete") == []

    def test_delete_empty_name(self, client, oc) -> None:
        client.delete_namespace("")
        assert oc.calls == []


class TestSubscription(TnbTestCase):
    """Test operator subscription handling."""

    def test_create_with_operator_group(self, client, oc) -> None:
        oc.respond("get", _OPERATOR_GROUP, stdout={"kind": "List", "items": []})

        client.create_subscription("stable", "amq-streams", "redhat-operators", "amq-streams")

        applied = [yaml.safe_load(document) for document in oc.inputs("apply")]
        assert [obj["kind"] for obj in applied] == ["OperatorGroup", "Subscription"]
        assert applied[0]["spec"] == {"targetNamespaces": ["tnb-tests"]}
        assert applied[1]["spec"]["channel"] == "stable"

    def test_create_existing_operator_group(self, client, oc) -> None:
        oc.respond(
            "get",
            _OPERATOR_GROUP,
            stdout={"kind": "List", "items": [{"kind": "OperatorGroup", "metadata": {"name": "global"}}]},
        )

        client.create_subscription("stable", "amq-streams", "redhat-operators", "amq-streams")

        applied = [yaml.safe_load(document) for document in oc.inputs("apply")]
        assert [obj["kind"] for obj in applied] == ["Subscription"]

    def test_wait_for_completion(self, client, oc, sleeps) -> None:
        """Test waiting goes through missing subscription, missing install plan and unfinished install plan."""
        subscription = self.load_json("subscription.json")
        pending = self.load_json("subscription.json")
        pending.pop("status")
        installing = self.load_json("installplan.json")
        installing["status"]["phase"] = "Installing"

        oc.not_found("get", _SUBSCRIPTION, "amq-streams")
        oc.respond("get", _SUBSCRIPTION, "amq-streams", stdout=pending)
        oc.respond("get", _SUBSCRIPTION, "amq-streams", stdout=subscription)
        oc.respond("get", _INSTALL_PLAN, "install-x7p2q", stdout=installing)
        oc.respond("get", _INSTALL_PLAN, "install-x7p2q", stdout=self.load_json("installplan.json"))

        assert client.wait_for_completion("amq-streams") == WaitOutcome.SUCCESS
        assert len(oc.commands("get", _SUBSCRIPTION)) == 4
        assert len(oc.commands("get", _INSTALL_PLAN)) == 2
        assert sleeps == [5.0, 5.0, 5.0]

    def test_wait_for_completion_timeout(self, client, oc, sleeps) -> None:
        oc.not_found("get", _SUBSCRIPTION, "amq-streams")

        with pytest.raises(WaitTimeoutError, match="install plan from subscription amq-streams"):
            client.wait_for_completion("amq-streams")

        assert len(oc.commands("get", _SUBSCRIPTION)) == 60
        assert len(sleeps) == 59

    def test_delete(self, client, oc) -> None:
        oc.respond("get", _SUBSCRIPTION, "amq-streams", stdout=self.load_json("subscription.json"))

        client.delete_subscription("amq-streams")

        assert oc.commands("delete") == [
            ["delete", "clusterserviceversions.operators.coreos.com", "amqstreams.v2.5.0-0", "--ignore-not-found",
             "--namespace", "tnb-tests"],
            ["delete", _SUBSCRIPTION, "amq-streams", "--ignore-not-found", "--namespace", "tnb-tests"],
        ]

    def test_delete_without_csv(self, client, oc) -> None:
        subscription = self.load_json("subscription.json")
        subscription["status"].pop("currentCSV")
        oc.respond("get", _SUBSCRIPTION, "amq-streams", stdout=subscription)

        client.delete_subscription("amq-streams")

        assert [command[1] for command in oc.commands("delete")] == [_SUBSCRIPTION]

    def test_delete_not_found(self, client, oc) -> None:
        oc.not_found("get", _SUBSCRIPTION, "amq-streams")
        with pytest.raises(TnbException):
            client.delete_subscription("amq-streams")


class TestImageStream(TnbTestCase):
    """Test waiting for image stream tags."""

    def test_wait(self, client, oc, sleeps) -> None:
        without_tag = self.load_json("imagestream.json")
        without_tag["spec"]["tags"] = []

        oc.not_found("get", "imagestream", "my-app")
        oc.respond("get", "imagestream", "my-app", stdout=without_tag)
        oc.respond("get", "imagestream", "my-app", stdout=self.load_json("imagestream.json"))

        assert client.wait_for_image_stream("my-app", "latest") == WaitOutcome.SUCCESS
        assert len(sleeps) == 2

    def test_wait_timeout(self, client, oc, sleeps) -> None:
        oc.respond("get", "imagestream", "my-app", stdout=self.load_json("imagestream.json"))

        with pytest.raises(WaitTimeoutError, match="my-app contains 2.0 tag"):
            client.wait_for_image_stream("my-app", "2.0")

        assert len(oc.commands("get", "imagestream")) == 24


class TestBuild(TnbTestCase):
    """Test s2i builds."""

    @staticmethod
    def _build(phase):
        return {"kind": "Build", "metadata": {"name": "my-app-3"}, "status": {"phase": phase}}

    def test_build_complete(self, client, oc, sleeps, tmp_path) -> None:
        archive = tmp_path / "my-app.jar"
        archive.write_text("jar")
        oc.respond("get", "buildconfig", "my-app", stdout=self.load_json("buildconfig.json"))
        oc.not_found("get", "build", "my-app-3")
        oc.respond("get", "build", "my-app-3", stdout=self._build("Running"))
        oc.respond("get", "build", "my-app-3", stdout=self._build("Complete"))

        assert client.do_s2i_build("my-app", archive) == WaitOutcome.SUCCESS

        assert oc.commands("start-build") == [
            ["start-build", "my-app", f"--from-file={archive.absolute()}", "--namespace", "tnb-tests"]
        ]
        assert len(sleeps) == 1

    def test_build_failed(self, client, oc, sleeps) -> None:
        oc.respond("get", "buildconfig", "my-app", stdout=self.load_json("buildconfig.json"))
        oc.respond("get", "build", "my-app-3", stdout=self._build("Running"))
        oc.respond("get", "build", "my-app-3", stdout=self._build("Running"))
        oc.respond("get", "build", "my-app-3", stdout=self._build("Failed"))

        with pytest.raises(WaitFailureError, match="build my-app"):
            client.do_s2i_build("my-app", Path("my-app.jar"))

        assert len(sleeps) == 1

    def test_start_build_error(self, client, oc) -> None:
        oc.respond("start-build", returncode=1, stderr='buildconfigs.build.openshift.io "my-app" not found')
        with pytest.raises(OCError):
            client.do_s2i_build("my-app", Path("my-app.jar"))

    def test_build_bounded(self, client, oc, sleeps) -> None:
        oc.respond("get", "buildconfig", "my-app", stdout=self.load_json("buildconfig.json"))
        oc.respond("get", "build", "my-app-3", stdout=self._build("Running"))

        with pytest.raises(WaitTimeoutError):
            client.do_s2i_build("my-app", Path("my-app.jar"), max_attempts=5)

        assert len(sleeps) == 4


class TestPortForward(TnbTestCase):
    """Test port-forwarding to services."""

    def test_port_forward(self, client, oc, monkeypatch) -> None:
        process = flexmock(poll=lambda: None)
        process.should_receive("terminate").once()
        process.should_receive("wait").with_args(timeout=10).once()
        started = []

        def _popen(args, **kwargs):
            started.append(args)
            return process

        monkeypatch.setattr("tnb.openshift.client._subprocess_popen", _popen)

        port_forward = client.port_forward("mongodb", 27017)
        assert started == [["oc", "port-forward", "--namespace", "tnb-tests", "svc/mongodb", "27017:27017"]]
        assert port_forward.local_port == 27017

        port_forward.close()

    def test_close_finished(self) -> None:
        process = flexmock(poll=lambda: 1)
        process.should_receive("terminate").never()
        PortForward(process=process, local_port=1, remote_port=1).close()

    def test_close_kill(self) -> None:
        process = flexmock(poll=lambda: None)
        process.should_receive("terminate").once()
        process.should_receive("wait").with_args(timeout=10).and_raise(subprocess.TimeoutExpired("oc", 10))
        process.should_receive("wait").with_args().once()
        process.should_receive("kill").once()
        PortForward(process=process, local_port=1, remote_port=1).close()
