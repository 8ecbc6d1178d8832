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

"""A command line interface to tnb-openshift."""

import sys
import click
import logging
from pathlib import Path
from typing import Optional

import daiquiri

from tnb.openshift import __version__
from tnb.openshift.client import OpenShiftClient
from tnb.openshift.config import OpenshiftConfiguration
from tnb.openshift.config import TestConfiguration
from tnb.openshift.config import load_properties_file
from tnb.openshift.deployment import OpenshiftDeployable
from tnb.openshift.deployment import registry
from tnb.openshift.exceptions import TnbException

from termcolor import colored

daiquiri.setup()
_LOGGER = logging.getLogger("tnb.openshift")
_LOGGER.setLevel(logging.INFO)

_MARK_OK = colored("✔", "green")
_MARK_BAD = colored("✖", "red")


def _get_client(ctx: click.Context, namespace: Optional[str]) -> OpenShiftClient:
    """Create a client from configuration, namespace given on command line takes precedence."""
    properties = dict(ctx.obj["properties"])
    if namespace:
        properties[OpenshiftConfiguration.NAMESPACE] = namespace

    configuration = OpenshiftConfiguration(properties=properties)
    _LOGGER.debug("Using configuration %r", configuration.to_dict())
    client = OpenShiftClient.from_configuration(configuration)
    client.login()
    return client


def _run(func) -> None:
    """Run the given operation, report outcome and exit with non-zero code on failure."""
    try:
        func()
    except TnbException as exc:
        _LOGGER.error("%s", str(exc))
        click.echo(f"{_MARK_BAD} {str(exc)}")
        sys.exit(1)

    click.echo(f"{_MARK_OK} done")


_namespace_option = click.option(
    "--namespace",
    "-n",
    type=str,
    required=False,
    default=None,
    metavar="NAMESPACE",
    help="OpenShift namespace to work in, openshift.namespace property is used if not given.",
)


@click.group()
@click.option("--debug/--no-debug", default=False, help="Run in a debug mode.")
@click.option(
    "--properties",
    "-p",
    "properties_path",
    type=click.Path(exists=True, dir_okay=False),
    required=False,
    default=None,
    envvar="TNB_PROPERTIES",
    metavar="PATH",
    help="YAML file with configuration properties.",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, properties_path: Optional[str]) -> None:
    """Provision service dependencies of tests in an OpenShift cluster."""
    if debug:
        _LOGGER.setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["properties"] = load_properties_file(properties_path) if properties_path else {}


@cli.command()
def version() -> None:
    """Print tnb-openshift version and exit."""
    click.echo(f"tnb-openshift: {__version__}")


@cli.command("create-namespace")
@click.argument("name", required=False, metavar="NAME")
@click.pass_context
def create_namespace(ctx: click.Context, name: Optional[str]) -> None:
    """Create a namespace, the configured one if no name is given."""
    _run(lambda: _get_client(ctx, name).create_namespace(name))


@cli.command("delete-namespace")
@click.argument("name", required=False, metavar="NAME")
@click.pass_context
def delete_namespace(ctx: click.Context, name: Optional[str]) -> None:
    """Delete a namespace, the configured one if no name is given."""
    _run(lambda: _get_client(ctx, name).delete_namespace(name))


@cli.command("subscribe")
@click.argument("operator_name", metavar="OPERATOR")
@click.option("--channel", "-c", type=str, required=True, help="Operator hub channel.")
@click.option(
    "--source",
    "-s",
    type=str,
    required=False,
    default="redhat-operators",
    show_default=True,
    help="Catalog source providing the operator.",
)
@click.option(
    "--subscription-name",
    type=str,
    required=False,
    default=None,
    help="Name of the subscription, operator name is used if not given.",
)
@click.option(
    "--wait/--no-wait",
    default=True,
    show_default=True,
    help="Wait until the install plan of the subscription completes.",
)
@_namespace_option
@click.pass_context
def subscribe(
    ctx: click.Context,
    operator_name: str,
    channel: str,
    source: str,
    subscription_name: Optional[str],
    wait: bool,
    namespace: Optional[str],
) -> None:
    """Subscribe to an operator and wait until it is installed."""
    subscription_name = subscription_name or operator_name

    def _subscribe() -> None:
        client = _get_client(ctx, namespace)
        client.create_subscription(channel, operator_name, source, subscription_name)
        if wait:
            client.wait_for_completion(subscription_name)

    _run(_subscribe)


@cli.command("unsubscribe")
@click.argument("subscription_name", metavar="SUBSCRIPTION")
@_namespace_option
@click.pass_context
def unsubscribe(ctx: click.Context, subscription_name: str, namespace: Optional[str]) -> None:
    """Delete a subscription together with the operator it installed."""
    _run(lambda: _get_client(ctx, namespace).delete_subscription(subscription_name))


@cli.command("wait-image-stream")
@click.argument("name", metavar="IMAGE_STREAM")
@click.argument("tag", metavar="TAG")
@_namespace_option
@click.pass_context
def wait_image_stream(ctx: click.Context, name: str, tag: str, namespace: Optional[str]) -> None:
    """Wait until an image stream contains the given tag."""
    _run(lambda: _get_client(ctx, namespace).wait_for_image_stream(name, tag))


@cli.command("build")
@click.argument("name", metavar="BUILD_CONFIG")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False), metavar="FILE")
@_namespace_option
@click.pass_context
def build(ctx: click.Context, name: str, file_path: str, namespace: Optional[str]) -> None:
    """Start an s2i binary build from a file and wait until it finishes."""
    _run(lambda: _get_client(ctx, namespace).do_s2i_build(name, Path(file_path)))


def _get_service(ctx: click.Context, service: str, namespace: Optional[str]):
    backend = TestConfiguration(properties=ctx.obj["properties"]).backend
    class_ = registry.resolve(service, backend)
    if issubclass(class_, OpenshiftDeployable):
        return class_(_get_client(ctx, namespace))
    return class_()


@cli.command("deploy")
@click.argument("service", metavar="SERVICE")
@_namespace_option
@click.pass_context
def deploy(ctx: click.Context, service: str, namespace: Optional[str]) -> None:
    """Deploy a service and wait until it is ready.

    The implementation is picked by the test.use.openshift property, only the
    OpenShift backend ships services.
    """
    _LOGGER.info("Deploying service %r", service)
    _run(lambda: _get_service(ctx, service, namespace).deploy())


@cli.command("undeploy")
@click.argument("service", metavar="SERVICE")
@_namespace_option
@click.pass_context
def undeploy(ctx: click.Context, service: str, namespace: Optional[str]) -> None:
    """Remove a deployed service."""
    _LOGGER.info("Undeploying service %r", service)
    _run(lambda: _get_service(ctx, service, namespace).undeploy())


__name__ == "__main__" and cli()
