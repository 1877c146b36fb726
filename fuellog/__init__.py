"""FuelLog: refuel records, mileage and monthly statistics."""

__version__ = "0.5.0"
