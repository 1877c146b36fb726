"""
Calculation Constants for FuelLog

Centralized location for conversion factors and the value caps enforced on
vehicles and refuel records.
"""

# Conversion factors
IMPERIAL_GAL_PER_LITER = 0.219969  # Liters to imperial gallons
MILES_PER_KM = 0.621371  # Kilometers to miles

# Record value caps (inclusive)
MAX_ODOMETER = 9_999_999
MAX_VOLUME = 9_999.999
MAX_COST = 999_999.999
MAX_PRICE = 999_999.999

# Vehicle constraints
MIN_NAME_LENGTH = 1
MAX_NAME_LENGTH = 20
VEHICLE_NAME_PATTERN = r"[A-Za-z0-9][A-Za-z0-9\- ]*"
MAX_TANK_CAPACITY = 1000.0

# Default tank capacity per volume unit
DEFAULT_TANK_GALLONS = 16.0
DEFAULT_TANK_LITERS = 60.0

# Gauge position bounds for mileage estimates
GAUGE_EMPTY = 0.0
GAUGE_FULL = 1.0

# Date range cap: months before the current month shown for "all"
MAX_PLOT_MONTHS_BACK = 23
