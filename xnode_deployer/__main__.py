"""CLI entry point: python -m xnode_deployer deploy|undeploy|ipv4|list ..."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from xnode_deployer.models import DeployInput


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _deployer_for(provider: str, hardware, **kwargs):
    from xnode_deployer.config import api_key_for
    from xnode_deployer.providers.registry import create_deployer, ensure_provider_registered

    ensure_provider_registered(provider)
    return create_deployer(provider, api_key_for(provider), hardware, **kwargs)


def _load_record(name: str):
    from xnode_deployer.state import load_deployment

    record = load_deployment(name)
    if record is None:
        _fail(f"No deployment named {name!r}")
    return record


def cmd_deploy(args: argparse.Namespace) -> None:
    from xnode_deployer.config import load_config
    from xnode_deployer.errors import Error, ReadinessTimeout, format_payload
    from xnode_deployer.state import load_deployment, save_deployment

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        _fail(f"Invalid config {args.config}: {e}")

    existing = load_deployment(args.name)
    if existing is not None and existing.status == "active":
        _fail(f"Deployment {args.name!r} is already active. Run: xnode-deployer undeploy --name {args.name}")

    input = DeployInput(
        xnode_owner=args.owner,
        domain=args.domain,
        acme_email=args.acme_email,
        user_passwd=args.user_passwd,
        encrypted=args.encrypted,
        initial_config=args.initial_config,
    )

    try:
        deployer = _deployer_for(config.provider, config.hardware, **config.deployer_kwargs())
        print(f"Deploying {args.name} on {config.provider} ({config.hardware.kind})")
        handle = deployer.deploy(input)
    except Error as e:
        if e.handle is None:
            _fail(str(e))
        # The instance exists; keep it reachable by name.
        save_deployment(args.name, config.provider, config.hardware, e.handle)
        detail = f" Last seen: {format_payload(e.payload)}." if isinstance(e, ReadinessTimeout) else ""
        _fail(
            f"{e}. Instance {json.dumps(e.handle.to_dict())} was created.{detail} "
            f"Run: xnode-deployer undeploy --name {args.name}"
        )
    except (RuntimeError, ValueError) as e:
        _fail(str(e))

    save_deployment(args.name, config.provider, config.hardware, handle)
    print(f"Handle: {json.dumps(handle.to_dict())}")

    if args.wait:
        try:
            ip = deployer.wait_for_ipv4(handle)
        except Error as e:
            _fail(f"{e}. The instance exists; run: xnode-deployer undeploy --name {args.name}")
        print(f"IPv4: {ip if ip else 'not supported'}")


def cmd_undeploy(args: argparse.Namespace) -> None:
    from xnode_deployer.config import hardware_from_dict
    from xnode_deployer.errors import Error
    from xnode_deployer.state import update_deployment_status

    record = _load_record(args.name)
    if record.status != "active":
        _fail(f"Deployment {args.name!r} is {record.status}")

    try:
        deployer = _deployer_for(record.provider, hardware_from_dict(record.provider, record.hardware))
        deployer.undeploy(deployer.handle_from_dict(record.handle))
    except (Error, RuntimeError, ValueError) as e:
        _fail(str(e))

    update_deployment_status(args.name, "destroyed")
    print(f"Undeployed {args.name}")


def cmd_ipv4(args: argparse.Namespace) -> None:
    from xnode_deployer.config import hardware_from_dict
    from xnode_deployer.errors import Error
    from xnode_deployer.models import Supported

    record = _load_record(args.name)
    try:
        deployer = _deployer_for(record.provider, hardware_from_dict(record.provider, record.hardware))
        result = deployer.ipv4(deployer.handle_from_dict(record.handle))
    except (Error, RuntimeError, ValueError) as e:
        _fail(str(e))

    if not isinstance(result, Supported):
        print("not supported")
    elif result.value is None:
        print("pending")
    else:
        print(result.value)


def cmd_list(args: argparse.Namespace) -> None:
    from xnode_deployer.state import list_deployments

    records = list_deployments(status=args.status)
    if not records:
        print("No deployments found.")
        return

    print(f"{'NAME':<30} {'STATUS':<12} {'PROVIDER':<12} {'HANDLE':<30} {'CREATED':<26}")
    print("-" * 110)
    for r in records:
        created = r.created_at[:19] if r.created_at else ""
        handle = json.dumps(r.handle)
        print(f"{r.name:<30} {r.status:<12} {r.provider:<12} {handle:<30} {created:<26}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="xnode-deployer",
        description="Deploy xnodes on cloud providers",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # -- deploy --
    p_deploy = subparsers.add_parser("deploy", help="Deploy an xnode")
    p_deploy.add_argument("--config", required=True, help="Path to deployment YAML (provider + hardware)")
    p_deploy.add_argument("--name", required=True, help="Local name used to find the deployment later")
    p_deploy.add_argument("--owner", default=None, help="Xnode owner identity")
    p_deploy.add_argument("--domain", default=None)
    p_deploy.add_argument("--acme-email", default=None, help="Contact email for ACME certificates")
    p_deploy.add_argument("--user-passwd", default=None)
    p_deploy.add_argument("--encrypted", default=None)
    p_deploy.add_argument("--initial-config", default=None)
    p_deploy.add_argument("--wait", action="store_true", default=False,
                          help="Block until the instance reports a public IPv4 address")
    p_deploy.set_defaults(func=cmd_deploy)

    # -- undeploy --
    p_undeploy = subparsers.add_parser("undeploy", help="Tear down a deployment")
    p_undeploy.add_argument("--name", required=True)
    p_undeploy.set_defaults(func=cmd_undeploy)

    # -- ipv4 --
    p_ipv4 = subparsers.add_parser("ipv4", help="Show the public IPv4 address of a deployment")
    p_ipv4.add_argument("--name", required=True)
    p_ipv4.set_defaults(func=cmd_ipv4)

    # -- list --
    p_list = subparsers.add_parser("list", help="List all deployments")
    p_list.add_argument("--status", default=None, choices=["active", "destroyed"],
                        help="Filter by deployment status")
    p_list.set_defaults(func=cmd_list)

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # Silence noisy third-party loggers unless --verbose
    if not args.verbose:
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    args.func(args)


if __name__ == "__main__":
    main()
