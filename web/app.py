"""Flask JSON API for fleet part maintenance status."""

import logging
import os
import threading
from datetime import date
from pathlib import Path
from typing import Optional

from flask import Flask, abort, jsonify, request

from fleetparts import (
    Criteria,
    PartCatalog,
    PartFilter,
    Snapshot,
    Status,
    aggregate,
    build_snapshot,
    default_catalog,
    distinct_cities,
    filter_history,
    filter_vehicles,
    load_catalog,
    sort_vehicles,
)
from fleetparts.config import ALL_CITIES, ALL_RECORDS, ALL_STATUSES, cache_ttl_minutes, infer_mileage_scale
from fleetparts.tables import load_rows

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")
app.config.update(
    SCHEDULE_FILE=os.environ.get("FLEET_SCHEDULE_FILE"),
    HISTORY_FILE=os.environ.get("FLEET_HISTORY_FILE"),
    CATALOG_FILE=os.environ.get("FLEET_CATALOG_FILE"),
    INFER_MILEAGE_SCALE=infer_mileage_scale(),
    CACHE_TTL_MINUTES=cache_ttl_minutes(),
)
app.json.ensure_ascii = False

# Guards the loaded catalog and snapshot; re-entrant since get_snapshot loads the catalog
_lock = threading.RLock()
_snapshot: Optional[Snapshot] = None
_catalog: Optional[PartCatalog] = None
_catalog_file: Optional[str] = None

STATUS_VALUES = [s.value for s in Status]


def get_catalog(reload: bool = False) -> PartCatalog:
    """Configured part catalog, or the bundled one; a catalog file is loaded once."""
    global _catalog, _catalog_file
    catalog_file = app.config.get("CATALOG_FILE")
    if not catalog_file:
        return default_catalog()
    with _lock:
        if reload or _catalog is None or _catalog_file != catalog_file:
            _catalog = load_catalog(catalog_file)
            _catalog_file = catalog_file
        return _catalog


def get_snapshot(force: bool = False) -> Snapshot:
    """Current snapshot, re-derived when missing, stale or from another day."""
    global _snapshot
    with _lock:
        stale = (
            _snapshot is None
            or _snapshot.current_date != date.today().isoformat()
            or _snapshot.is_stale(app.config["CACHE_TTL_MINUTES"])
        )
        if force or stale:
            schedule_file = app.config.get("SCHEDULE_FILE")
            history_file = app.config.get("HISTORY_FILE")
            if not schedule_file or not history_file:
                abort(503, description="Data files are not configured")
            _snapshot = build_snapshot(
                load_rows(Path(schedule_file)),
                load_rows(Path(history_file)),
                get_catalog(reload=force),
                infer_mileage_scale=app.config["INFER_MILEAGE_SCALE"],
            )
        return _snapshot


def reset_snapshot() -> None:
    """Drop the in-memory snapshot and catalog."""
    global _snapshot, _catalog, _catalog_file
    with _lock:
        _snapshot = None
        _catalog = None
        _catalog_file = None


def vehicle_summary(vehicle) -> dict:
    """List view of a vehicle: roster fields, part status and counts."""
    counts = vehicle.status_counts()
    worst = vehicle.worst_status
    return {
        "license": vehicle.license,
        "city": vehicle.city,
        "model": vehicle.model,
        "year": vehicle.year,
        "currentMileage": vehicle.current_mileage,
        "status": worst.value if worst else None,
        "counts": {status.value: counts[status] for status in Status},
        "parts": {
            name: part.to_dict() if part is not None else None
            for name, part in vehicle.parts.items()
        },
        "records": len(vehicle.history),
    }


def bad_request(message: str):
    response = jsonify(error=message)
    response.status_code = 400
    return response


@app.errorhandler(404)
@app.errorhandler(503)
def json_error(error):
    response = jsonify(error=error.description)
    response.status_code = error.code
    return response


@app.route("/api/vehicles")
def vehicles():
    """Vehicle list with query-string filters."""
    snapshot = get_snapshot()
    catalog = get_catalog()

    status = request.args.get("status", ALL_STATUSES)
    if status != ALL_STATUSES and status not in STATUS_VALUES:
        return bad_request(f"Unknown status '{status}'")

    part_filter = None
    part = request.args.get("part")
    if part:
        if part not in catalog:
            return bad_request(f"Unknown part '{part}'")
        part_status = request.args.get("part_status", ALL_RECORDS)
        if part_status != ALL_RECORDS and part_status not in STATUS_VALUES:
            return bad_request(f"Unknown part status '{part_status}'")
        part_filter = PartFilter(part, part_status)

    criteria = Criteria(
        text=request.args.get("q", ""),
        city=request.args.get("city", ALL_CITIES),
        status=status,
        part=part_filter,
    )
    result = filter_vehicles(snapshot.vehicles, criteria)
    result = sort_vehicles(
        result,
        sort_by=request.args.get("sort", "city"),
        reverse=request.args.get("order", "asc").lower() == "desc",
    )

    return jsonify(
        currentDate=snapshot.current_date,
        total=len(snapshot.vehicles),
        count=len(result),
        vehicles=[vehicle_summary(v) for v in result],
    )


@app.route("/api/vehicles/<license>")
def vehicle_detail(license: str):
    """One vehicle with its (optionally filtered) history."""
    snapshot = get_snapshot()
    vehicle = snapshot.get_vehicle(license)
    if vehicle is None:
        abort(404, description=f"Vehicle '{license}' not found")

    history = filter_history(
        vehicle.history,
        get_catalog(),
        part=request.args.get("part") or None,
        text=request.args.get("q", ""),
    )
    data = vehicle_summary(vehicle)
    data["history"] = [dict(h.to_dict(), state=h.state.value) for h in history]
    data["currentDate"] = snapshot.current_date
    return jsonify(data)


@app.route("/api/cities")
def cities():
    return jsonify(cities=distinct_cities(get_snapshot().vehicles))


@app.route("/api/stats")
def stats():
    snapshot = get_snapshot()
    result = aggregate(snapshot.vehicles)
    return jsonify(
        currentDate=snapshot.current_date,
        empty=snapshot.is_empty,
        total=result.total,
        withGood=result.with_good,
        withWarning=result.with_warning,
        withCritical=result.with_critical,
    )


@app.route("/api/parts")
def parts():
    catalog = get_catalog()
    return jsonify(
        parts=[
            {"name": p.name, "title": p.display_name, "keywords": list(p.keywords)}
            for p in catalog.parts
        ]
    )


@app.route("/api/refresh", methods=["POST"])
def refresh():
    """Re-derive the snapshot from the data files."""
    snapshot = get_snapshot(force=True)
    logger.info("Snapshot refreshed: %d vehicles", len(snapshot.vehicles))
    return jsonify(
        currentDate=snapshot.current_date,
        generatedAt=snapshot.generated_at.isoformat(timespec="seconds"),
        vehicles=len(snapshot.vehicles),
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
