"""Human-readable formatting of simulation quantities (SI input)."""

from . import constants as C


def mass_to_display(mass_kg: float) -> str:
    if mass_kg == 0:
        return "0 kg"
    if mass_kg >= 0.1 * C.SOLAR_MASS:
        return f"{mass_kg / C.SOLAR_MASS:.2f} M☉"
    if mass_kg >= 0.1 * C.EARTH_MASS:
        return f"{mass_kg / C.EARTH_MASS:.2f} M⊕"
    return f"{mass_kg:.2e} kg"


def distance_to_display(dist_meters: float) -> str:
    if dist_meters == 0:
        return "0 m"
    if abs(dist_meters) >= 0.1 * C.AU:
        return f"{dist_meters / C.AU:.2f} AU"
    if abs(dist_meters) >= 1e6:
        return f"{dist_meters / 1e6:.2f} Mm"
    if abs(dist_meters) >= 1e3:
        return f"{dist_meters / 1e3:.2f} km"
    return f"{dist_meters:.1f} m"


def time_to_display(seconds: float) -> str:
    if seconds < 0:
        return "N/A"
    if seconds == 0:
        return "0 s"
    for unit, size in (("years", C.SECONDS_PER_YEAR), ("days", C.SECONDS_PER_DAY),
                       ("hrs", C.SECONDS_PER_HOUR), ("min", 60.0)):
        if seconds >= size:
            return f"{seconds / size:.1f} {unit}"
    return f"{seconds:.3g} s"


def energy_to_display(energy_joules: float) -> str:
    """Energy in J with an SI prefix, scientific notation beyond yotta."""
    if energy_joules == 0:
        return "0 J"
    magnitude = abs(energy_joules)
    if magnitude >= 1e27:
        return f"{energy_joules:.3e} J"
    for prefix, size in (("Y", 1e24), ("Z", 1e21), ("E", 1e18), ("P", 1e15),
                         ("T", 1e12), ("G", 1e9), ("M", 1e6), ("k", 1e3)):
        if magnitude >= size:
            return f"{energy_joules / size:.2f} {prefix}J"
    return f"{energy_joules:.3g} J"


def relative_to_display(value: float, reference: float) -> str:
    """Format ``value`` as a fraction of ``|reference|`` (drift reports)."""
    if reference == 0:
        return f"{value:.3e}"
    return f"{value / abs(reference):.3e} rel"
