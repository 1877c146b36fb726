"""
Refuel record routes for FuelLog.

Handles record CRUD, mileage listing, estimates and the entry calculator.
"""

import logging

from flask import Blueprint, jsonify, request

from ..calculations.entry import DataEntryMode, complete_entry
from ..calculations.mileage import segments_by_id
from ..entities import RefuelRecord
from ..exceptions import ValidationError
from .helpers import bool_field, datetime_field, get_core, get_json_body, number_field

logger = logging.getLogger(__name__)

records_bp = Blueprint('records', __name__)


def _purchase_values(data: dict, volume=None, cost=None):
    """
    Volume and cost for a record body.

    When a price is supplied with only one of volume or cost, the other is
    derived from it.
    """
    price = number_field(data, 'price')
    body_volume = number_field(data, 'volume')
    body_cost = number_field(data, 'cost')
    if body_volume is not None:
        volume = body_volume
    if body_cost is not None:
        cost = body_cost

    if price is not None:
        if body_cost is not None and body_volume is None:
            values = complete_entry(DataEntryMode.CALCULATE_VOLUME, price=price, cost=cost)
        else:
            values = complete_entry(DataEntryMode.CALCULATE_COST, price=price, volume=volume)
        volume, cost = values.volume, values.cost
    return volume, (cost or 0.0)


@records_bp.route('/vehicles/<int:vehicle_id>/records', methods=['GET'])
def list_records(vehicle_id):
    """List a vehicle's records (odometer ascending) with mileage segments."""
    core = get_core()
    core.repository.get_vehicle(vehicle_id)
    records = core.records_with_mileage(vehicle_id)
    return jsonify({
        'vehicle_id': vehicle_id,
        'units': core.settings.units.value,
        'records': [r.to_dict() for r in records],
        'segment_count': len(segments_by_id(records)),
    })


@records_bp.route('/vehicles/<int:vehicle_id>/records', methods=['POST'])
def create_record(vehicle_id):
    """
    Add a refuel record.

    Request body:
        timestamp: ISO datetime (defaults to now)
        odometer: Odometer reading
        volume: Fuel purchased
        cost: Total cost (0 for unknown)
        price: Optional price per unit; derives volume or cost
        full_tank: Whether the tank was filled
        hide_from_calc: Exclude from statistics
        notes: Optional single-line notes
    """
    core = get_core()
    data = get_json_body()

    volume, cost = _purchase_values(data)
    odometer = number_field(data, 'odometer', cast=int)
    if odometer is None or volume is None:
        raise ValidationError("odometer and volume are required")

    record = RefuelRecord(
        timestamp=datetime_field(data, 'timestamp'),
        odometer=odometer,
        volume=volume,
        cost=cost,
        full_tank=bool_field(data, 'full_tank'),
        hide_from_calc=bool_field(data, 'hide_from_calc'),
        notes=str(data.get('notes') or ""),
    )
    core.prepare_record(record)
    core.repository.create_record(vehicle_id, record)
    return jsonify(record.to_dict()), 201


@records_bp.route('/records/<int:record_id>', methods=['PATCH'])
def update_record(record_id):
    """Update fields of a refuel record; omitted fields keep their values."""
    core = get_core()
    data = get_json_body()
    record = core.repository.get_record(record_id)

    volume, cost = _purchase_values(data, record.volume, record.cost)
    record = RefuelRecord(
        id=record.id,
        vehicle_id=record.vehicle_id,
        timestamp=datetime_field(data, 'timestamp', record.timestamp),
        odometer=number_field(data, 'odometer', record.odometer, cast=int),
        volume=volume,
        cost=cost,
        full_tank=bool_field(data, 'full_tank', record.full_tank),
        hide_from_calc=bool_field(data, 'hide_from_calc', record.hide_from_calc),
        notes=str(data.get('notes', record.notes) or ""),
    )
    core.prepare_record(record)
    core.repository.update_record(record)
    return jsonify(record.to_dict())


@records_bp.route('/records/<int:record_id>', methods=['DELETE'])
def delete_record(record_id):
    core = get_core()
    core.repository.delete_record(record_id)
    return jsonify({'message': f'Record {record_id} deleted'})


@records_bp.route('/records/<int:record_id>/estimate', methods=['GET'])
def estimate_record(record_id):
    """
    Estimate mileage for a partial fill.

    Query params:
        gauge: Fuel gauge position after the purchase, 0.0 (empty) to 1.0 (full)
    """
    core = get_core()
    gauge = number_field(request.args, 'gauge')
    if gauge is None:
        raise ValidationError("gauge is required", field='gauge')
    segment = core.estimate(record_id, gauge)
    return jsonify({'record_id': record_id, 'gauge': gauge, 'segment': segment.to_dict()})


@records_bp.route('/entry/calculate', methods=['POST'])
def calculate_entry():
    """
    Derive the third of price, volume and cost from the other two.

    Request body:
        mode: Optional data entry mode (defaults to the configured one)
        price, volume, cost: The two known values
    """
    core = get_core()
    data = get_json_body()
    mode = DataEntryMode.from_preference(data.get('mode', core.settings.data_entry_mode))
    values = core.calculate_entry(
        price=number_field(data, 'price'),
        volume=number_field(data, 'volume'),
        cost=number_field(data, 'cost'),
        mode=mode,
    )
    return jsonify({
        'mode': mode.value,
        'price': values.price,
        'volume': values.volume,
        'cost': values.cost,
    })
