"""
Vehicle routes for FuelLog.

Handles vehicle CRUD operations.
"""

import logging

from flask import Blueprint, jsonify

from ..entities import Vehicle
from ..exceptions import ValidationError
from .helpers import get_core, get_json_body, number_field

logger = logging.getLogger(__name__)

vehicles_bp = Blueprint('vehicles', __name__)


@vehicles_bp.route('/vehicles', methods=['GET'])
def list_vehicles():
    """List vehicles ordered by name."""
    core = get_core()
    return jsonify([v.to_dict() for v in core.repository.list_vehicles()])


@vehicles_bp.route('/vehicles', methods=['POST'])
def create_vehicle():
    """
    Create a vehicle.

    Request body:
        name: 1-20 letters, digits, spaces or dashes
        tank_capacity: Optional tank size (defaults from the unit system)
    """
    core = get_core()
    data = get_json_body()
    name = data.get('name')
    if not isinstance(name, str):
        raise ValidationError("name is required", field='name', value=name)

    vehicle = core.new_vehicle(name, number_field(data, 'tank_capacity'))
    logger.info(f"Vehicle created via API: {vehicle.name}")
    return jsonify(vehicle.to_dict()), 201


@vehicles_bp.route('/vehicles/<int:vehicle_id>', methods=['GET'])
def get_vehicle(vehicle_id):
    core = get_core()
    return jsonify(core.repository.get_vehicle(vehicle_id).to_dict())


@vehicles_bp.route('/vehicles/<int:vehicle_id>', methods=['PATCH'])
def update_vehicle(vehicle_id):
    """Rename a vehicle or change its tank capacity."""
    core = get_core()
    data = get_json_body()
    current = core.repository.get_vehicle(vehicle_id)
    name = data.get('name', current.name)
    if not isinstance(name, str):
        raise ValidationError("name must be a string", field='name', value=name)

    vehicle = Vehicle(
        name=name,
        tank_capacity=number_field(data, 'tank_capacity', current.tank_capacity),
        id=vehicle_id,
    )
    core.repository.update_vehicle(vehicle)
    return jsonify(vehicle.to_dict())


@vehicles_bp.route('/vehicles/<int:vehicle_id>', methods=['DELETE'])
def delete_vehicle(vehicle_id):
    """Delete a vehicle and all of its records."""
    core = get_core()
    core.repository.delete_vehicle(vehicle_id)
    return jsonify({'message': f'Vehicle {vehicle_id} deleted'})
