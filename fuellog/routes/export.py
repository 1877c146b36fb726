"""
Export routes for FuelLog.

Handles CSV export and import of a vehicle's refuel records.
"""

import io
import logging

from flask import Blueprint, Response, jsonify, request

from .helpers import get_core

logger = logging.getLogger(__name__)

export_bp = Blueprint('export', __name__)


@export_bp.route('/vehicles/<int:vehicle_id>/export', methods=['GET'])
def export_records(vehicle_id) -> Response:
    """
    Export a vehicle's records as CSV, one record per line.

    Efficiency columns are recalculated in the requested units
    (``?units=`` overrides the configured unit system).
    """
    core = get_core()
    vehicle = core.repository.get_vehicle(vehicle_id)

    output = io.StringIO()
    count = core.export_records(vehicle_id, output)
    logger.info(f"Exported {count} records for {vehicle.name}")

    return Response(
        output.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{vehicle.export_filename}"'}
    )


@export_bp.route('/vehicles/<int:vehicle_id>/import', methods=['POST'])
def import_records(vehicle_id):
    """
    Import CSV records for a vehicle, all or nothing.

    Accepts multipart form data with a ``file`` part, or the CSV as the raw
    request body.

    Returns:
        JSON with the number of records imported
    """
    core = get_core()

    if request.files:
        if 'file' not in request.files:
            return jsonify({'error': 'No file provided'}), 400
        file = request.files['file']
        if file.filename == '':
            return jsonify({'error': 'No file selected'}), 400
        source = file.read()
    else:
        source = request.get_data()
        if not source:
            return jsonify({'error': 'No data provided'}), 400

    count = core.import_records(vehicle_id, source)
    return jsonify({
        'message': f'Successfully imported {count} records',
        'vehicle_id': vehicle_id,
        'imported': count,
    })
