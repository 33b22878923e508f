"""Physical constants and default solver configuration (SI units)."""

# Gravitational constant, m^3 kg^-1 s^-2
G_REAL = 6.67430e-11

AU = 1.495978707e11  # m
EARTH_MOON_DISTANCE = 3.844e8  # m

SOLAR_MASS = 1.98847e30  # kg
EARTH_MASS = 5.9722e24  # kg
MOON_MASS = 7.342e22  # kg

EARTH_ORBITAL_SPEED = 29780.0  # m/s, mean speed about the Sun
MOON_ORBITAL_SPEED = 1022.0  # m/s, mean speed about the Earth

SECONDS_PER_HOUR = 3600.0
SECONDS_PER_DAY = 86400.0
SECONDS_PER_YEAR = 365.25 * SECONDS_PER_DAY

# Defaults used when a caller omits settings
DEFAULT_TIME_STEP = SECONDS_PER_HOUR
DEFAULT_DURATION = SECONDS_PER_YEAR

# Number of bodies the model is built around
BODY_COUNT = 3

# Body indices of the Sun-Earth-Moon preset
SUN, EARTH, MOON = 0, 1, 2
