#!/usr/bin/env python3
"""
Catalog CLI - Admin access to the showroom catalog

Command-line tool for pulling, editing, importing/exporting and publishing
the catalog document. `pull` loads the catalog the same way a visitor
would (cloud first, local cache as fallback) and refreshes the local
working copy. The other commands edit and publish that working copy;
they only go to the cloud when nothing is cached yet.

Usage:
    # Load catalog and report where it came from
    showroom pull

    # Configure the admin publish target
    showroom settings set --endpoint https://api.jsonbin.io/v3/b/<BIN_ID> --api-key <MASTER_KEY> --enable

    # Replace all products from a JSON file
    showroom import --collection products products.json

    # Publish to the cloud (prompts unless --yes)
    showroom publish

Output is JSON for easy parsing.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from showroom.common.config import CloudSettings, ShowroomConfig, load_config
from showroom.common.exceptions import ShowroomError
from showroom.common.state import LocalStore
from showroom.services.sync import CatalogSyncService, Confirmation

COLLECTIONS = ("products", "cases")


def build_service(config: ShowroomConfig) -> CatalogSyncService:
    return CatalogSyncService(
        store=LocalStore(config.state_dir),
        public_config=config.public_read,
        policy=config.sync,
    )


def prompt_confirm(kind: Confirmation, message: str) -> bool:
    """Interactive y/N prompt on stderr"""
    print(f"[{kind.value}] {message}", file=sys.stderr)
    answer = input("Proceed? [y/N] ").strip().lower()
    return answer in ("y", "yes")


def auto_confirm(kind: Confirmation, message: str) -> bool:
    print(f"[{kind.value}] {message} (auto-confirmed)", file=sys.stderr)
    return True


async def cmd_pull(service: CatalogSyncService, args: argparse.Namespace) -> dict:
    status = await service.initialize()
    return {
        "success": True,
        "status": status.value,
        "endpoint": service.active_settings.endpoint_url if service.active_settings else "",
        "products": len(service.products),
        "cases": len(service.cases),
    }


async def cmd_list(service: CatalogSyncService, args: argparse.Namespace) -> dict:
    await service.initialize(prefer_cache=True)
    return {
        "success": True,
        "products": [
            {"id": p.id, "model": p.model, "name": p.name, "category": p.category.value}
            for p in service.products
        ],
        "cases": [{"id": c.id, "title": c.title} for c in service.cases],
    }


async def cmd_export(service: CatalogSyncService, args: argparse.Namespace) -> dict:
    await service.initialize(prefer_cache=True)

    if args.collection == "products":
        text = service.export_products()
    elif args.collection == "cases":
        text = service.export_cases()
    else:
        text = service.export_document()

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        return {"success": True, "collection": args.collection, "file": args.output}

    return {"success": True, "collection": args.collection, "data": json.loads(text)}


async def cmd_import(service: CatalogSyncService, args: argparse.Namespace) -> dict:
    await service.initialize(prefer_cache=True)
    payload = Path(args.file).read_text(encoding="utf-8")

    if not args.yes:
        message = f"Importing {args.file} replaces all current {args.collection}."
        if not prompt_confirm(Confirmation.OVERWRITE, message):
            return {"success": False, "error": "Import cancelled"}

    if args.collection == "products":
        count = service.import_products(payload)
    else:
        count = service.import_cases(payload)

    return {"success": True, "collection": args.collection, "imported": count}


async def cmd_delete(service: CatalogSyncService, args: argparse.Namespace) -> dict:
    await service.initialize(prefer_cache=True)
    if args.collection == "products":
        service.delete_product(args.id)
    else:
        service.delete_case(args.id)
    return {"success": True, "collection": args.collection, "deleted": args.id}


async def cmd_publish(service: CatalogSyncService, args: argparse.Namespace) -> dict:
    await service.initialize(prefer_cache=True)
    confirm = auto_confirm if args.yes else prompt_confirm
    result = await service.publish(confirm)

    if not result.published:
        return {
            "success": False,
            "error": "Publish cancelled",
            "declined": result.declined.value if result.declined else None,
            "size_kb": round(result.size_kb, 2),
        }

    return {
        "success": True,
        "size_kb": round(result.size_kb, 2),
        "last_updated": result.last_updated,
    }


async def cmd_settings(service: CatalogSyncService, args: argparse.Namespace) -> dict:
    current = service.load_admin_settings()

    if args.action == "set":
        enabled = current.enabled if args.enabled is None else args.enabled
        current = CloudSettings(
            enabled=enabled,
            endpoint_url=args.endpoint if args.endpoint is not None else current.endpoint_url,
            api_key=args.api_key if args.api_key is not None else current.api_key,
        )
        service.save_admin_settings(current)

    public = service.settings.public_config
    return {
        "success": True,
        "admin": {**current.to_dict(), "apiKey": _mask(current.api_key)},
        "public": {**public.to_dict(), "apiKey": _mask(public.api_key)},
        "endpoint_mismatch": service.settings.endpoint_mismatch(current),
    }


def _mask(key: str) -> str:
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}...{key[-4:]}"


COMMANDS = {
    "pull": cmd_pull,
    "list": cmd_list,
    "export": cmd_export,
    "import": cmd_import,
    "delete": cmd_delete,
    "publish": cmd_publish,
    "settings": cmd_settings,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="showroom",
        description="Manage and publish the showroom catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to config.yaml")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("pull", help="Load catalog (cloud, then cache)")
    subparsers.add_parser("list", help="List products and cases")

    export_parser = subparsers.add_parser("export", help="Export catalog as JSON")
    export_parser.add_argument(
        "--collection", choices=(*COLLECTIONS, "document"), default="document",
        help="What to export (default: whole document)",
    )
    export_parser.add_argument("--output", "-o", help="Write to file instead of stdout")

    import_parser = subparsers.add_parser("import", help="Replace a collection from a JSON array file")
    import_parser.add_argument("--collection", choices=COLLECTIONS, required=True)
    import_parser.add_argument("file", help="JSON file containing an array")
    import_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    delete_parser = subparsers.add_parser("delete", help="Delete one product or case")
    delete_parser.add_argument("--collection", choices=COLLECTIONS, required=True)
    delete_parser.add_argument("--id", required=True, help="Item id")

    publish_parser = subparsers.add_parser("publish", help="Publish catalog to the cloud")
    publish_parser.add_argument("--yes", "-y", action="store_true", help="Accept all confirmations")

    settings_parser = subparsers.add_parser("settings", help="Show or change admin cloud settings")
    settings_parser.add_argument("action", choices=("show", "set"))
    settings_parser.add_argument("--endpoint", help="Document URL, e.g. https://api.jsonbin.io/v3/b/<BIN_ID>")
    settings_parser.add_argument("--api-key", help="Master key used for publishing")
    toggle = settings_parser.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="enabled", action="store_true", default=None)
    toggle.add_argument("--disable", dest="enabled", action="store_false")

    return parser


async def run(args: argparse.Namespace) -> dict:
    config = load_config(args.config)
    service = build_service(config)
    try:
        return await COMMANDS[args.command](service, args)
    finally:
        await service.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        result = asyncio.run(run(args))
    except ShowroomError as e:
        result = {"success": False, "error": e.message}
    except OSError as e:
        result = {"success": False, "error": str(e)}

    print(json.dumps(result, ensure_ascii=False))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
