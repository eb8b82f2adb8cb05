#!/usr/bin/env python3
"""
dnsdeck command line

Manage DNS zones and records across providers with one set of commands.
Credentials come from a YAML bundle (--credentials or DNSDECK_CREDENTIALS)
and DNSDECK_<PROVIDER>_<FIELD> environment variables.

Examples:
    dnsdeck domains --search example
    dnsdeck records -p cloudflare --zone-id 023e105f --zone-name example.com
    dnsdeck create -p aliyun --zone-id example.com --zone-name example.com \\
        --type MX --name @ --content mx.example.com --mx-priority 10
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional

from .config import AppConfig, load_credentials
from .errors import DnsError, ErrorCode
from .models import (
    ConflictStrategy,
    Provider,
    RecordCreateRequest,
    RecordUpdateRequest,
)
from .providers import list_providers
from .service import DnsService

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _provider(value: str) -> Provider:
    try:
        return Provider(value.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in Provider)
        raise argparse.ArgumentTypeError(f"unknown provider '{value}' (choose from {choices})")


def _add_zone_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-p", "--provider", type=_provider, required=True, help="DNS provider")
    parser.add_argument("--zone-id", required=True, help="Provider zone id")
    parser.add_argument(
        "--zone-name", default="", help="Zone (domain) name, required by some providers"
    )


def _add_record_args(parser: argparse.ArgumentParser) -> None:
    _add_zone_args(parser)
    parser.add_argument("--type", dest="record_type", required=True, help="Record type")
    parser.add_argument("--name", required=True, help="Host relative to the zone, @ for apex")
    parser.add_argument("--content", required=True, help="Record value")
    parser.add_argument("--ttl", type=int, default=600, help="TTL in seconds (default: 600)")
    parser.add_argument("--mx-priority", type=int, help="MX preference")
    parser.add_argument("--srv-priority", type=int, help="SRV priority")
    parser.add_argument("--srv-weight", type=int, help="SRV weight")
    parser.add_argument("--srv-port", type=int, help="SRV port")
    parser.add_argument("--caa-flags", type=int, help="CAA flags")
    parser.add_argument("--caa-tag", help="CAA tag (issue, issuewild, iodef)")


def _record_fields(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "record_type": args.record_type,
        "name": args.name,
        "content": args.content,
        "ttl": args.ttl,
        "mx_priority": args.mx_priority,
        "srv_priority": args.srv_priority,
        "srv_weight": args.srv_weight,
        "srv_port": args.srv_port,
        "caa_flags": args.caa_flags,
        "caa_tag": args.caa_tag,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dnsdeck",
        description="Manage DNS zones and records across providers",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--credentials",
        default=None,
        help="YAML credential bundle (default: $DNSDECK_CREDENTIALS)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("providers", help="List supported providers")

    test = commands.add_parser("test", help="Check the configured credentials of a provider")
    test.add_argument("-p", "--provider", type=_provider, required=True, help="DNS provider")

    domains = commands.add_parser("domains", help="List zones across providers")
    domains.add_argument(
        "-p",
        "--provider",
        type=_provider,
        action="append",
        help="Only this provider (repeatable)",
    )
    domains.add_argument("--search", help="Case-insensitive filter on the zone name")

    records = commands.add_parser("records", help="List records in a zone")
    _add_zone_args(records)

    create = commands.add_parser("create", help="Create a record")
    _add_record_args(create)
    create.add_argument(
        "--overwrite",
        action="store_true",
        help="Update the existing record with the same type and name instead of failing",
    )

    update = commands.add_parser("update", help="Replace a record by id")
    _add_record_args(update)
    update.add_argument("--id", dest="record_id", required=True, help="Provider record id")

    delete = commands.add_parser("delete", help="Delete a record by id")
    _add_zone_args(delete)
    delete.add_argument("--id", dest="record_id", required=True, help="Provider record id")

    return parser


def run(args: argparse.Namespace, service: DnsService) -> int:
    """Execute one parsed command; returns the exit status"""
    if args.command == "providers":
        print_json(
            [
                {
                    "provider": p.value,
                    "display_name": p.display_name,
                    "credential_fields": list(p.credential_fields),
                    "configured": p in service.credentials,
                }
                for p in list_providers()
            ]
        )
        return 0

    if args.command == "test":
        credential = service.credentials.get(args.provider)
        secrets = credential.secrets if credential else {}
        result = service.test_credentials(args.provider, secrets)
        print_json(result.to_dict())
        return 0 if result.ok else 1

    if args.command == "domains":
        items = service.list_domains(provider_filter=args.provider, search=args.search)
        print_json([item.to_dict() for item in items])
        return 0

    if args.command == "records":
        records = service.list_records(args.provider, args.zone_id, args.zone_name)
        print_json([record.to_dict() for record in records])
        return 0

    if args.command == "create":
        strategy = (
            ConflictStrategy.OVERWRITE if args.overwrite else ConflictStrategy.DO_NOT_CREATE
        )
        req = RecordCreateRequest(conflict_strategy=strategy, **_record_fields(args))
        record = service.create_record(args.provider, args.zone_id, args.zone_name, req)
        print_json(record.to_dict())
        return 0

    if args.command == "update":
        req = RecordUpdateRequest(id=args.record_id, **_record_fields(args))
        record = service.update_record(args.provider, args.zone_id, args.zone_name, req)
        print_json(record.to_dict())
        return 0

    if args.command == "delete":
        service.delete_record(args.provider, args.zone_id, args.record_id, args.zone_name)
        print_json({"deleted": args.record_id})
        return 0

    raise DnsError(ErrorCode.INVALID_INPUT, f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = AppConfig.from_env()
        path = args.credentials if args.credentials is not None else config.credentials_path
        service = DnsService(load_credentials(path), config)
        status = run(args, service)
    except DnsError as e:
        logger.error(f"{args.command} failed: {e}")
        print_json(e.to_dict())
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
