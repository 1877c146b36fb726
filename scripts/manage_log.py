#!/usr/bin/env python3
"""
FuelLog Management CLI

Utility script for:
- Creating or upgrading the database schema
- Adding and listing vehicles
- Importing and exporting a vehicle's records as CSV
- Printing the statistics report

Usage:
    python scripts/manage_log.py migrate
    python scripts/manage_log.py add-vehicle "My Car" --tank 14.5
    python scripts/manage_log.py vehicles
    python scripts/manage_log.py import "My Car" records.csv
    python scripts/manage_log.py export "My Car" --output "My Car.csv"
    python scripts/manage_log.py report "My Car" --range ALL
"""

import argparse
import logging
import sys

from fuellog.config import Config
from fuellog.core import FuelLogCore
from fuellog.database import create_database_engine
from fuellog.exceptions import FuelLogError, NotFoundError
from fuellog.migrations import migrate
from fuellog.settings import KEY_PLOT_DATE_RANGE, KEY_UNITS, Settings

logger = logging.getLogger("manage_log")


def open_core(args) -> FuelLogCore:
    overrides = {}
    if getattr(args, "units", None):
        overrides[KEY_UNITS] = args.units
    if getattr(args, "range", None):
        overrides[KEY_PLOT_DATE_RANGE] = args.range
    settings = Settings.from_mapping(overrides, defaults=Settings.from_config())
    return FuelLogCore.open(args.database, settings, args.policy)


def find_vehicle(core: FuelLogCore, name: str):
    for vehicle in core.repository.list_vehicles():
        if vehicle.name == name:
            return vehicle
    raise NotFoundError("Vehicle", name)


def migrate_command(args):
    """Create or upgrade the schema."""
    engine = create_database_engine(args.database)
    try:
        result = migrate(engine, args.policy)
    finally:
        engine.dispose()

    if result.from_version is None:
        print(f"Created new database at schema v{result.to_version}")
    elif result.upgraded:
        print(f"Upgraded schema v{result.from_version} -> v{result.to_version}")
    else:
        print(f"Schema is current (v{result.to_version})")
    if result.data_lost:
        print("WARNING: upgrade failed; the database was rebuilt empty")
        for table in result.quarantined_tables:
            print(f"  previous data kept in table {table}")


def add_vehicle_command(args):
    """Create a vehicle."""
    core = open_core(args)
    try:
        vehicle = core.new_vehicle(args.name, args.tank)
        print(f"Created vehicle {vehicle.id}: {vehicle.name} (tank {vehicle.tank_capacity})")
    finally:
        core.close()


def vehicles_command(args):
    """List vehicles."""
    core = open_core(args)
    try:
        for vehicle in core.repository.list_vehicles():
            last = core.repository.max_odometer(vehicle.id)
            odometer = last if last is not None else "-"
            print(f"{vehicle.id:4d}  {vehicle.name:20s}  tank {vehicle.tank_capacity:7.2f}  odometer {odometer}")
    finally:
        core.close()


def import_command(args):
    """Import CSV records for a vehicle."""
    core = open_core(args)
    try:
        vehicle = find_vehicle(core, args.vehicle)
        with open(args.file, "rb") as f:
            count = core.import_records(vehicle.id, f)
        print(f"Imported {count} records into {vehicle.name}")
    finally:
        core.close()


def export_command(args):
    """Export a vehicle's records as CSV."""
    core = open_core(args)
    try:
        vehicle = find_vehicle(core, args.vehicle)
        output = args.output or vehicle.export_filename
        with open(output, "w", encoding="utf-8", newline="") as f:
            count = core.export_records(vehicle.id, f)
        print(f"Exported {count} records to {output}")
    finally:
        core.close()


def report_command(args):
    """Print the statistics report for a vehicle."""
    core = open_core(args)
    try:
        vehicle = find_vehicle(core, args.vehicle)
        print(core.statistics_report(vehicle.id).to_text())
    finally:
        core.close()


def build_parser():
    parser = argparse.ArgumentParser(
        description="FuelLog Management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create or upgrade the database
  python scripts/manage_log.py migrate --database sqlite:///fuellog.db

  # Import a CSV file written by an older version
  python scripts/manage_log.py import "My Car" "My Car.csv"

  # Two-year statistics in kilometers per liter
  python scripts/manage_log.py report "My Car" --range ALL --units KM_PER_L
        """
    )
    parser.add_argument("--database", default=Config.DATABASE_URL, help="Database URL")
    parser.add_argument(
        "--policy",
        default=Config.MIGRATION_FAILURE_POLICY,
        choices=["recreate", "quarantine"],
        help="What to do with old tables when an upgrade fails"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    migrate_parser = subparsers.add_parser("migrate", help="Create or upgrade the schema")
    migrate_parser.set_defaults(func=migrate_command)

    vehicle_parser = subparsers.add_parser("add-vehicle", help="Create a vehicle")
    vehicle_parser.add_argument("name", help="Vehicle name")
    vehicle_parser.add_argument("--tank", type=float, default=None, help="Tank capacity")
    vehicle_parser.add_argument("--units", help="Unit system (selects the default tank size)")
    vehicle_parser.set_defaults(func=add_vehicle_command)

    list_parser = subparsers.add_parser("vehicles", help="List vehicles")
    list_parser.set_defaults(func=vehicles_command)

    import_parser = subparsers.add_parser("import", help="Import CSV records")
    import_parser.add_argument("vehicle", help="Vehicle name")
    import_parser.add_argument("file", help="CSV file")
    import_parser.set_defaults(func=import_command)

    export_parser = subparsers.add_parser("export", help="Export CSV records")
    export_parser.add_argument("vehicle", help="Vehicle name")
    export_parser.add_argument("--output", help="Output file (default: <vehicle>.csv)")
    export_parser.add_argument("--units", help="Unit system for the efficiency column")
    export_parser.set_defaults(func=export_command)

    report_parser = subparsers.add_parser("report", help="Print the statistics report")
    report_parser.add_argument("vehicle", help="Vehicle name")
    report_parser.add_argument("--range", help="Date range (PAST_MONTH, PAST_6_MONTHS, ..., ALL)")
    report_parser.add_argument("--units", help="Unit system")
    report_parser.set_defaults(func=report_command)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        args.func(args)
    except FuelLogError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
