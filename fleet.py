#!/usr/bin/env python3
"""
Unified CLI for fleet part maintenance status.

Commands:
  status   - List vehicles with part status (filterable, sortable)
  vehicle  - Show one vehicle's part status and service history
  cities   - List cities in the roster
  stats    - Show vehicle counts per status
  parts    - List tracked part categories and their rules
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from fleetparts import (
    CatalogError,
    Criteria,
    HistoryRecord,
    PartCatalog,
    PartFilter,
    PartStatus,
    Snapshot,
    Status,
    Vehicle,
    aggregate,
    build_snapshot,
    default_catalog,
    distinct_cities,
    filter_history,
    filter_vehicles,
    load_catalog,
    load_snapshot,
    save_snapshot,
    sort_vehicles,
)
from fleetparts import config
from fleetparts.config import ALL_CITIES, ALL_RECORDS, ALL_STATUSES
from fleetparts.normalize import format_date
from fleetparts.query import SORT_KEYS
from fleetparts.rule import Basis
from fleetparts.tables import load_rows

# Parts shown as columns in the vehicle list
LIST_PART_COLUMNS = 7

STATUS_LABELS = {
    Status.GOOD: "OK",
    Status.WARNING: "WARN",
    Status.CRITICAL: "CRIT",
}

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance for display."""
    return f"{km:,.0f} km" if km is not None else "-"


def format_money(amount: Optional[float]) -> str:
    """Format a price for display."""
    return f"{amount:,.2f}" if amount else "-"


def truncate(text: Optional[str], max_len: int = 40) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def format_part_cell(part: Optional[PartStatus], time_based: bool = False) -> str:
    """Short cell for the vehicle list: months for time-based parts, else km."""
    if part is None:
        return "-"
    label = STATUS_LABELS[part.status]
    if time_based:
        months = part.months_diff
        value = f"{months}mo" if months is not None else "?"
    else:
        value = f"{part.mileage_diff:,}"
    return f"{label} {value}"


def is_time_based(catalog: PartCatalog, part_name: str) -> bool:
    """True if the part's base rule is measured in months or years."""
    part = catalog.get(part_name)
    if part is None or part.rule is None:
        return False
    return part.rule.rule.basis is not Basis.DISTANCE


# =============================================================================
# Status command
# =============================================================================


def make_vehicle_table(
    vehicles: List[Vehicle], catalog: PartCatalog, part_names: List[str]
) -> List[List[str]]:
    """Convert vehicles to list rows."""
    rows = []
    for vehicle in vehicles:
        counts = vehicle.status_counts()
        worst = vehicle.worst_status
        rows.append(
            [
                STATUS_LABELS[worst] if worst else "-",
                vehicle.license,
                truncate(vehicle.model, 24),
                vehicle.year or "-",
                vehicle.city,
                format_km(vehicle.current_mileage),
                *[
                    format_part_cell(vehicle.parts.get(name), is_time_based(catalog, name))
                    for name in part_names
                ],
                counts[Status.GOOD],
                counts[Status.WARNING],
                counts[Status.CRITICAL],
                len(vehicle.history),
            ]
        )
    return rows


def print_stats(vehicles: List[Vehicle]) -> None:
    stats = aggregate(vehicles)
    print(
        f"Vehicles: {stats.total}  "
        f"good: {stats.with_good}  "
        f"warning: {stats.with_warning}  "
        f"critical: {stats.with_critical}"
    )


def cmd_status(args, snapshot: Snapshot, catalog: PartCatalog):
    """List vehicles with part status."""
    part_filter = None
    if args.part:
        if args.part not in catalog:
            print(f"Error: Unknown part '{args.part}'")
            return 1
        part_filter = PartFilter(args.part, args.part_status)

    criteria = Criteria(
        text=args.search or "",
        city=args.city or ALL_CITIES,
        status=args.status,
        part=part_filter,
    )
    vehicles = filter_vehicles(snapshot.vehicles, criteria)
    vehicles = sort_vehicles(vehicles, sort_by=args.sort, reverse=args.desc)

    print(f"Reference date: {snapshot.current_date}")
    print_stats(snapshot.vehicles)
    if vehicles != snapshot.vehicles:
        print(f"Showing: {len(vehicles)} (filtered)")
    print()

    if not vehicles:
        print("No vehicles found.")
        return 0

    part_names = catalog.names[:LIST_PART_COLUMNS]
    headers = [
        "",
        "License",
        "Model",
        "Year",
        "City",
        "Mileage",
        *part_names,
        "Good",
        "Warn",
        "Crit",
        "Records",
    ]
    print(
        tabulate(
            make_vehicle_table(vehicles, catalog, part_names),
            headers=headers,
            tablefmt="simple",
        )
    )
    return 0


# =============================================================================
# Vehicle command
# =============================================================================


def make_parts_table(vehicle: Vehicle, catalog: PartCatalog) -> List[List[str]]:
    """Convert a vehicle's part statuses to table rows, in catalog order."""
    rows = []
    for name in catalog.names:
        part = vehicle.parts.get(name)
        if part is None:
            rows.append([catalog.title(name), "-", "-", "-", "-", "-"])
            continue
        rows.append(
            [
                catalog.title(name),
                part.status.value,
                format_date(part.date) or "-",
                format_km(part.mileage),
                format_km(part.mileage_diff),
                part.time_diff or "-",
            ]
        )
    return rows


def make_history_table(records: List[HistoryRecord]) -> List[List[str]]:
    """Convert history records to table rows."""
    rows = []
    for record in records:
        quantity = ""
        if record.quantity:
            quantity = f"{record.quantity:g} {record.display_unit}".strip()
        rows.append(
            [
                format_date(record.date) or "-",
                format_km(record.mileage),
                truncate(record.description),
                record.part_code or "-",
                quantity or "-",
                format_money(record.total_with_vat),
                record.status or "-",
            ]
        )
    return rows


def cmd_vehicle(args, snapshot: Snapshot, catalog: PartCatalog):
    """Show one vehicle's part status and service history."""
    vehicle = snapshot.get_vehicle(args.license)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.license}'")
        return 1
    if args.part and args.part not in catalog:
        print(f"Error: Unknown part '{args.part}'")
        return 1

    print(f"Vehicle: {vehicle.license}  {vehicle.model} {vehicle.year}".rstrip())
    print(f"City: {vehicle.city or '-'}")
    print(f"Current mileage: {format_km(vehicle.current_mileage)} (as of {snapshot.current_date})")
    print()

    headers = ["Part", "Status", "Last Done", "At", "Since (km)", "Since (time)"]
    print(tabulate(make_parts_table(vehicle, catalog), headers=headers, tablefmt="simple"))
    print()

    records = filter_history(vehicle.history, catalog, part=args.part, text=args.search or "")
    print(f"History entries: {len(vehicle.history)}")
    if args.part or args.search:
        print(f"Showing: {len(records)} (filtered)")
    total = sum(r.total_with_vat for r in records)
    if total > 0:
        print(f"Total with VAT: {total:,.2f}")
    print()

    if not records:
        print("No history entries found.")
        return 0

    headers = ["Date", "Mileage", "Description", "Code", "Qty", "Total", "Status"]
    print(tabulate(make_history_table(records), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Cities / stats / parts commands
# =============================================================================


def cmd_cities(args, snapshot: Snapshot, catalog: PartCatalog):
    """List cities in the roster."""
    for city in distinct_cities(snapshot.vehicles):
        print(city)
    return 0


def cmd_stats(args, snapshot: Snapshot, catalog: PartCatalog):
    """Show vehicle counts per status."""
    print(f"Reference date: {snapshot.current_date}")
    print_stats(snapshot.vehicles)
    return 0


def cmd_parts(args, snapshot: Snapshot, catalog: PartCatalog):
    """List tracked part categories and their rules."""
    rows = []
    for part in catalog.parts:
        rule = part.rule.rule.describe() if part.rule else f"default: {catalog.default_rule.describe()}"
        rows.append([part.name, part.display_name, ", ".join(part.keywords), rule])
    headers = ["Name", "Title", "Keywords", "Rule"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


COMMANDS = {
    "status": cmd_status,
    "vehicle": cmd_vehicle,
    "cities": cmd_cities,
    "stats": cmd_stats,
    "parts": cmd_parts,
}


# =============================================================================
# Main
# =============================================================================


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def derivation_settings(args) -> dict:
    """Inputs that change derived vehicles; a cached snapshot must match them."""
    infer_scale = args.infer_mileage_scale
    if infer_scale is None:
        infer_scale = config.infer_mileage_scale()
    return {
        "schedule": str(args.schedule_file.resolve()),
        "history": str(args.history_file.resolve()),
        "catalog": str(args.catalog.resolve()) if args.catalog else "",
        "inferMileageScale": bool(infer_scale),
    }


def load_data(args, catalog: PartCatalog) -> Snapshot:
    """Use a fresh cached snapshot if available, else derive from the tables."""
    settings = derivation_settings(args)
    if args.cache and not args.refresh:
        cached = load_snapshot(args.cache)
        if (
            cached is not None
            and cached.current_date == args.as_of.isoformat()
            and cached.settings == settings
        ):
            return cached

    snapshot = build_snapshot(
        load_rows(args.schedule_file),
        load_rows(args.history_file),
        catalog,
        args.as_of,
        settings["inferMileageScale"],
    )
    snapshot.settings = settings
    if args.cache:
        save_snapshot(args.cache, snapshot)
    return snapshot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fleet part maintenance status",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s schedule.csv history.csv status
  %(prog)s schedule.csv history.csv status --city Київ --status critical
  %(prog)s schedule.csv history.csv status --part timing_belt --part-status warning
  %(prog)s schedule.csv history.csv vehicle AA1234BM --part brake_pads
  %(prog)s schedule.csv history.csv --as-of 2024-02-10 stats
  %(prog)s schedule.csv history.csv parts
""",
    )
    parser.add_argument("schedule_file", type=Path, help="Vehicle roster table (CSV/XLSX)")
    parser.add_argument("history_file", type=Path, help="Maintenance log table (CSV/XLSX)")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=date.today(),
        help="Reference date in YYYY-MM-DD format (default: today)",
    )
    parser.add_argument("--catalog", type=Path, help="Part catalog YAML (default: bundled)")
    parser.add_argument(
        "--infer-mileage-scale",
        action="store_true",
        default=None,
        help="Read small mileages as thousands (e.g. 352 -> 352,000)",
    )
    parser.add_argument("--cache", type=Path, help="Snapshot cache file (YAML)")
    parser.add_argument("--refresh", action="store_true", help="Ignore the cached snapshot")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Status subcommand
    status_parser = subparsers.add_parser("status", help="List vehicles with part status")
    status_parser.add_argument("--search", type=str, help="Text in license, city or model")
    status_parser.add_argument("--city", type=str, help="Exact city name")
    status_parser.add_argument(
        "--status",
        choices=[ALL_STATUSES] + [s.value for s in Status],
        default=ALL_STATUSES,
        help="Vehicles with at least one part in this status",
    )
    status_parser.add_argument("--part", type=str, help="Vehicles with a record for this part")
    status_parser.add_argument(
        "--part-status",
        choices=[ALL_RECORDS] + [s.value for s in Status],
        default=ALL_RECORDS,
        help="Status the --part must be in (default: any)",
    )
    status_parser.add_argument("--sort", choices=SORT_KEYS, default="city", help="Sort order")
    status_parser.add_argument("--desc", action="store_true", help="Sort descending")

    # Vehicle subcommand
    vehicle_parser = subparsers.add_parser("vehicle", help="Show one vehicle")
    vehicle_parser.add_argument("license", type=str, help="Vehicle license")
    vehicle_parser.add_argument("--part", type=str, help="Only history for this part")
    vehicle_parser.add_argument("--search", type=str, help="Text in history records")

    subparsers.add_parser("cities", help="List cities")
    subparsers.add_parser("stats", help="Show vehicle counts per status")
    subparsers.add_parser("parts", help="List part categories and rules")
    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.catalog is not None and not args.catalog.exists():
        print(f"Error: File not found: {args.catalog}")
        return 1

    try:
        catalog = load_catalog(args.catalog) if args.catalog else default_catalog()
    except CatalogError as e:
        print(f"Error: {e}")
        return 1

    # The catalog listing needs no tables
    if args.command == "parts":
        return cmd_parts(args, None, catalog)

    for path in (args.schedule_file, args.history_file):
        if not path.exists():
            print(f"Error: File not found: {path}")
            return 1

    try:
        snapshot = load_data(args, catalog)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if snapshot.is_empty:
        print("No data: the vehicle roster is empty.")
        return 0

    return COMMANDS[args.command](args, snapshot, catalog)


if __name__ == "__main__":
    sys.exit(main() or 0)
