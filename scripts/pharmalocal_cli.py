"""
Operator CLI for the PharmaLocal store.

    python -m scripts.pharmalocal_cli migrate [--legacy-file data.json]
    python -m scripts.pharmalocal_cli export [--output backup.json]
    python -m scripts.pharmalocal_cli import backup.json
    python -m scripts.pharmalocal_cli clear --yes
    python -m scripts.pharmalocal_cli report --patient-id <id> [--full]
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from apps.planner.export_render.orchestrator import (
    prepare_treatment_report,
    render_full_report,
    render_treatment_report,
    save_backup,
)
from packages.db.backup import BackupCodec
from packages.db.migration import LegacyMigrator
from packages.db.store import EntityStore
from packages.shared.config import StoreConfig
from packages.shared.errors import MigrationError

logger = logging.getLogger("pharmalocal.cli")


def _store(args: argparse.Namespace) -> EntityStore:
    config = StoreConfig.for_directory(args.data_dir) if args.data_dir else StoreConfig.from_env()
    return EntityStore(config)


def cmd_migrate(store: EntityStore, args: argparse.Namespace) -> int:
    if args.legacy_file:
        blob = Path(args.legacy_file).read_text(encoding="utf-8")
        store.kv.set_item(store.config.legacy_storage_key, blob)
        logger.info("Loaded legacy blob from %s", args.legacy_file)
    try:
        report = LegacyMigrator(store).migrate()
    except MigrationError as exc:
        logger.error("Migration failed: %s", exc)
        return 1
    print(json.dumps(report.model_dump(), indent=2))
    return 0


def cmd_export(store: EntityStore, args: argparse.Namespace) -> int:
    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(BackupCodec(store).export(), encoding="utf-8")
        print(str(out))
        return 0
    ref = save_backup(store, store.config.data_dir)
    print(ref.uri)
    return 0


def cmd_import(store: EntityStore, args: argparse.Namespace) -> int:
    document = Path(args.file).read_bytes()
    if not BackupCodec(store).import_data(document):
        logger.error("Import rejected: %s is not a valid backup", args.file)
        return 1
    return 0


def cmd_clear(store: EntityStore, args: argparse.Namespace) -> int:
    if not args.yes:
        logger.error("Refusing to clear the store without --yes")
        return 2
    BackupCodec(store).clear_all()
    return 0


def cmd_report(store: EntityStore, args: argparse.Namespace) -> int:
    if not args.patient_id and not args.full:
        logger.error("Nothing to render: pass --patient-id and/or --full")
        return 2
    data_dir = store.config.data_dir
    report = None
    if args.patient_id:
        report = prepare_treatment_report(
            store,
            args.patient_id,
            include_inactive=args.include_inactive,
            pharmacist_signature=not args.no_signature,
        )
        bundle = render_treatment_report(report, data_dir)
        for ref in (bundle.xlsx, bundle.pdf, bundle.html):
            print(ref.uri)
    if args.full:
        print(render_full_report(store, data_dir, report=report).uri)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PharmaLocal store maintenance and report export.")
    parser.add_argument("--data-dir", help="Data directory (database and exports). Defaults to PHARMALOCAL_DATA_DIR.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("migrate", help="Run the one-time legacy migration.")
    p.add_argument("--legacy-file", help="Legacy flat JSON document to migrate.")
    p.set_defaults(func=cmd_migrate)

    p = sub.add_parser("export", help="Write a backup document.")
    p.add_argument("--output", help="Destination file. Defaults to DATA_DIR/exports.")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Replace the store contents with a backup document.")
    p.add_argument("file", help="Backup JSON file.")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("clear", help="Delete every record in the four collections.")
    p.add_argument("--yes", action="store_true", help="Confirm the destructive reset.")
    p.set_defaults(func=cmd_clear)

    p = sub.add_parser("report", help="Render treatment-plan and/or full-store reports.")
    p.add_argument("--patient-id", help="Patient whose stored treatments are rendered.")
    p.add_argument("--full", action="store_true", help="Also write reporte_completo_pharmalocal.xlsx.")
    p.add_argument("--include-inactive", action="store_true", help="Include inactive treatments.")
    p.add_argument("--no-signature", action="store_true", help="Omit the pharmacist signature line.")
    p.set_defaults(func=cmd_report)
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    args = build_parser().parse_args(argv)
    store = _store(args)
    try:
        return args.func(store, args)
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
