"""NASA JPL ephemeris helpers for building Sun-Earth-Moon initial conditions."""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.request import urlopen

import numpy as np
from jplephem.spk import SPK

from . import constants as C
from .physics import Body, ThreeBodySystem

logger = logging.getLogger(__name__)

SUN_ID = 10
EARTH_ID = 399
MOON_ID = 301

# Segment chains from the solar-system barycentre (0) to each target.
# Earth and Moon are stored relative to the Earth-Moon barycentre (3).
SEGMENT_CHAINS = {
    SUN_ID: ((0, SUN_ID),),
    EARTH_ID: ((0, 3), (3, EARTH_ID)),
    MOON_ID: ((0, 3), (3, MOON_ID)),
}


def load_ephemeris(path: str) -> SPK:
    """Load a JPL SPK ephemeris file."""
    return SPK.open(path)


def julian_date(epoch: datetime) -> float:
    return epoch.timestamp() / 86400.0 + 2440587.5


def body_state(ephem, target: int, epoch: datetime) -> tuple[np.ndarray, np.ndarray]:
    """Return barycentric position (m) and velocity (m/s) of ``target``."""
    jd = julian_date(epoch)
    chain = SEGMENT_CHAINS.get(target, ((0, target),))
    pos = np.zeros(3, dtype=float)
    vel = np.zeros(3, dtype=float)
    for center, body in chain:
        p, v = ephem[center, body].compute_and_differentiate(jd)
        pos += np.asarray(p, dtype=float)
        vel += np.asarray(v, dtype=float)
    # km and km/day from the kernel
    return pos * 1000.0, vel * 1000.0 / C.SECONDS_PER_DAY


def create_body(
    ephem,
    target: int,
    epoch: datetime,
    mass: float,
    *,
    name: Optional[str] = None,
) -> Body:
    """Create a :class:`Body` instance from ephemeris data."""
    pos, vel = body_state(ephem, target, epoch)
    return Body(name or str(target), mass, pos, vel)


def create_system(ephem, epoch: datetime) -> ThreeBodySystem:
    """Sun, Earth and Moon at ``epoch`` in the barycentric frame."""
    logger.info("Building Sun-Earth-Moon system for %s", epoch.isoformat())
    return ThreeBodySystem((
        create_body(ephem, SUN_ID, epoch, C.SOLAR_MASS, name="Sun"),
        create_body(ephem, EARTH_ID, epoch, C.EARTH_MASS, name="Earth"),
        create_body(ephem, MOON_ID, epoch, C.MOON_MASS, name="Moon"),
    ))


def download_ephemeris(url: str, dest: str | Path) -> Path:
    """Download a JPL ephemeris BSP file.

    Parameters
    ----------
    url:
        HTTP(S) location of the BSP file.
    dest:
        Destination directory or full file path where the kernel will be
        written. If ``dest`` is a directory, the filename is taken from
        ``url``.

    Returns
    -------
    Path
        Path of the downloaded file.
    """
    dest_path = Path(dest)
    if dest_path.is_dir():
        dest_path = dest_path / Path(url).name

    logger.info("Downloading %s to %s", url, dest_path)
    with urlopen(url) as resp, open(dest_path, "wb") as f:
        shutil.copyfileobj(resp, f)

    return dest_path.resolve()
