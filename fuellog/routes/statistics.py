"""
Statistics routes for FuelLog.

Provides the monthly statistics report for a vehicle:
- Per-month distance, volume, cost and price
- Summary with min/avg/max efficiency when the range spans several months
"""

import logging

from flask import Blueprint, Response, jsonify, request

from .helpers import get_core

logger = logging.getLogger(__name__)

statistics_bp = Blueprint("statistics", __name__)


@statistics_bp.route("/vehicles/<int:vehicle_id>/statistics", methods=["GET"])
def get_statistics(vehicle_id):
    """
    Statistics report for a vehicle.

    Query params:
        format: 'json' (default) or 'text'
        plot_date_range: Optional range override (PAST_MONTH ... ALL)
        units: Optional unit system override
    """
    core = get_core()
    report = core.statistics_report(vehicle_id)

    if request.args.get("format", "json").lower() == "text":
        return Response(report.to_text(), mimetype="text/plain")
    return jsonify(report.to_dict())


@statistics_bp.route("/vehicles/<int:vehicle_id>/monthly", methods=["GET"])
def get_monthly_trips(vehicle_id):
    """Monthly trip totals across the configured date range, oldest first."""
    core = get_core()
    core.repository.get_vehicle(vehicle_id)
    monthly = core.monthly_trips(vehicle_id)
    date_range = core.date_range()

    months = []
    for month in monthly.months(date_range):
        months.append({"month": month.long_label, "year": month.year, **monthly.trips_for(month).to_dict()})

    return jsonify({
        "vehicle_id": vehicle_id,
        "range": date_range.to_dict(),
        "months": months,
        "total": monthly.total().to_dict(),
    })
