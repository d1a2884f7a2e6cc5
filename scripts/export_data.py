#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from restopos.core.config import DATABASE_URL  # noqa: E402
from restopos.core.database import build_engine  # noqa: E402
from restopos.core.errors import RestoPosError  # noqa: E402
from restopos.services.container import build_services  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Backup, restore and SQL export of the local store.")
    parser.add_argument("--database-url", default=DATABASE_URL, help="Local store URL (default: DATABASE_URL)")
    sub = parser.add_subparsers(dest="command", required=True)

    backup = sub.add_parser("backup", help="Write a JSON backup of every collection and setting")
    backup.add_argument("--output", help="Destination file (default: stdout)")

    sql = sub.add_parser("sql", help="Write a PostgreSQL dump of the local data")
    sql.add_argument("--output", help="Destination file (default: stdout)")
    sql.add_argument("--no-schema", action="store_true", help="Skip the CREATE TABLE section")

    psql = sub.add_parser("psql", help="Write a shell snippet that pipes the dump into psql")
    psql.add_argument("--output", help="Destination file (default: stdout)")
    psql.add_argument(
        "--connection-string",
        help="Target PostgreSQL URL (default: saved neon_connection_string)",
    )

    restore = sub.add_parser("restore", help="Overwrite the local store with a JSON backup")
    restore.add_argument("input", help="Backup file to import")
    return parser.parse_args(argv)


def _write(content: str, output: str | None) -> None:
    if output:
        Path(output).write_text(content, encoding="utf-8")
        print(f"Written: {output}", file=sys.stderr)
    else:
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    services = build_services(build_engine(args.database_url))

    try:
        if args.command == "backup":
            _write(services.backup.export_backup_json(), args.output)
        elif args.command == "sql":
            _write(services.sql_export.export_sql(include_schema=not args.no_schema), args.output)
        elif args.command == "psql":
            connection_string = args.connection_string
            if not connection_string:
                connection_string = services.settings.load_connection_settings().neon_connection_string
            if not connection_string:
                print("No connection string given or saved; writing plain SQL.", file=sys.stderr)
            _write(services.sql_export.export_psql_script(connection_string), args.output)
        elif args.command == "restore":
            content = Path(args.input).read_text(encoding="utf-8-sig")
            summary = services.backup.import_backup_json(content)
            print(
                "Restored keys: {keys} | settings set: {applied} | settings removed: {removed}".format(
                    keys=", ".join(summary["restored_keys"]) or "-",
                    applied=len(summary["settings_applied"]),
                    removed=len(summary["settings_removed"]),
                )
            )
    except RestoPosError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    except OSError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
