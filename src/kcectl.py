#!/usr/bin/env python3
"""
CLI tool for the KCE cloud provider.

Drives the load balancer capability by hand for a Service manifest, using the
same configuration as the controller.
"""

import asyncio
import json
import logging

import click
import yaml
from tabulate import tabulate

from config import LoggingConfig, get_config
from katapult.base import KatapultError
from loadbalancer import LoadBalancerManager, LoadBalancerNotFound
from naming import load_balancer_name
from providers.base import Capability
from providers.registry import get_registry, register_builtin_providers
from service import Service
from validation import service_from_manifest, validate_service_manifest

logger = logging.getLogger(__name__)


def load_service(filename: str) -> Service:
    """Read and validate a Service manifest from a YAML/JSON file."""
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    is_valid, error = validate_service_manifest(data)
    if not is_valid:
        raise click.ClickException(f"Invalid service manifest: {error}")

    return service_from_manifest(data)


def run(operation):
    """
    Run an operation against the configured load balancer manager.

    Args:
        operation: Coroutine function taking a LoadBalancerManager
    """

    async def _run():
        config = get_config()
        register_builtin_providers()
        registry = get_registry()
        try:
            provider = await registry.get_provider(config.provider.name, config)
            manager = provider.get(Capability.LOAD_BALANCER)
            if manager is None:
                raise click.ClickException(
                    f"Provider {config.provider.name} does not support load balancers"
                )
            return await operation(manager)
        finally:
            await registry.close()

    try:
        return asyncio.run(_run())
    except (KatapultError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """KCE cloud provider CLI - manage Katapult load balancers for services"""
    level = log_level or LoggingConfig.from_env().level
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


service_file = click.option(
    "--filename",
    "-f",
    required=True,
    type=click.Path(exists=True),
    help="Service manifest (YAML or JSON)",
)


@cli.command()
@click.argument("cluster")
@service_file
def name(cluster, filename):
    """Show the load balancer name for a service"""
    service = load_service(filename)
    click.echo(load_balancer_name(cluster, service.namespace, service.name))


@cli.command()
@click.argument("cluster")
@service_file
def status(cluster, filename):
    """Show whether the load balancer exists and its ingress address"""
    service = load_service(filename)

    async def _status(manager: LoadBalancerManager):
        return await manager.get_load_balancer_status(cluster, service)

    lb_status, exists = run(_status)
    if not exists:
        click.echo("Load balancer does not exist")
        return

    for ingress in lb_status.ingress:
        click.echo(f"Ingress: {ingress.ip}")


@cli.command()
@click.argument("cluster")
@service_file
def ensure(cluster, filename):
    """Create or update the load balancer for a service"""
    service = load_service(filename)

    async def _ensure(manager: LoadBalancerManager):
        return await manager.ensure_load_balancer(cluster, service, [])

    lb_status = run(_ensure)
    click.echo("Load balancer reconciled successfully!")
    for ingress in lb_status.ingress:
        click.echo(f"Ingress: {ingress.ip}")


@cli.command()
@click.argument("cluster")
@service_file
def rules(cluster, filename):
    """List the rules of a service's load balancer"""
    service = load_service(filename)

    async def _rules(manager: LoadBalancerManager):
        balancer = await manager.get_load_balancer(
            manager.get_load_balancer_name(cluster, service)
        )
        return await manager.list_load_balancer_rules(balancer)

    try:
        result = run(_rules)
    except LoadBalancerNotFound as e:
        raise click.ClickException(str(e)) from e

    headers = ["ID", "Listen", "Destination", "Protocol", "Algorithm", "Check"]
    rows = [
        [
            rule.id,
            rule.listen_port,
            rule.destination_port,
            rule.protocol,
            rule.algorithm,
            "✓" if rule.check_enabled else "✗",
        ]
        for rule in result
    ]
    click.echo(tabulate(rows, headers=headers, tablefmt="grid"))


@cli.command()
@click.argument("cluster")
@service_file
@click.confirmation_option(
    prompt="Are you sure you want to delete this load balancer?"
)
def delete(cluster, filename):
    """Delete the load balancer for a service"""
    service = load_service(filename)

    async def _delete(manager: LoadBalancerManager):
        await manager.ensure_load_balancer_deleted(cluster, service)

    run(_delete)
    click.echo("Load balancer deleted")


if __name__ == "__main__":
    cli()
