# polyline_codec.py
# Encoded polyline format (Google "polylinealgorithm") ↔ Coord sequences.
# https://developers.google.com/maps/documentation/utilities/polylinealgorithm

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

import polyline

from .models import Coord, RouteStep
from .nav_config import POLYLINE_PRECISION

logger = logging.getLogger(__name__)

_OFFSET = 63
_CHUNK_BITS = 5
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20


class PolylineDecodeError(ValueError):
    """Raised for truncated or otherwise malformed encoded polylines."""


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _read_value(encoded: str, index: int) -> Tuple[int, int]:
    """Read one signed delta starting at index; return (delta, next_index)."""
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise PolylineDecodeError(
                f"Polyline ends in the middle of a value at offset {index}."
            )
        byte = ord(encoded[index]) - _OFFSET
        if byte < 0:
            raise PolylineDecodeError(
                f"Invalid character {encoded[index]!r} at offset {index}."
            )
        index += 1
        result |= (byte & _CHUNK_MASK) << shift
        shift += _CHUNK_BITS
        if byte < _CONTINUATION:
            break

    if result & 1:
        return ~(result >> 1), index
    return result >> 1, index


def iter_polyline(encoded: str, precision: int = POLYLINE_PRECISION) -> Iterator[Coord]:
    """
    Lazily decode an encoded polyline.

    Args:
        encoded:   Encoded polyline string (may be empty).
        precision: Decimal places used by the encoder (5 for Google, 6 for OSRM).

    Yields:
        Coord for each point, in path order.

    Raises:
        PolylineDecodeError: If the string is truncated or contains
            characters outside the encoding alphabet.
    """
    factor = 10 ** precision
    index = 0
    lat = 0
    lon = 0
    while index < len(encoded):
        d_lat, index = _read_value(encoded, index)
        d_lon, index = _read_value(encoded, index)
        lat += d_lat
        lon += d_lon
        yield Coord(lat / factor, lon / factor)


def decode_polyline(encoded: str, precision: int = POLYLINE_PRECISION) -> List[Coord]:
    """Decode an encoded polyline into a list of coordinates."""
    return list(iter_polyline(encoded, precision))


def with_precise_ends(
    encoded: str,
    start: Coord,
    end: Coord,
    precision: int = POLYLINE_PRECISION,
) -> List[Coord]:
    """
    Decode a polyline and bracket it with more accurate endpoints.

    Used when a GPS fix is better than the rounded endpoints in the
    directions response. The decoded points are kept unchanged in between.
    """
    return [start, *iter_polyline(encoded, precision), end]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_polyline(points: Iterable[Coord], precision: int = POLYLINE_PRECISION) -> str:
    """Encode coordinates into the compact polyline string format."""
    return polyline.encode([(p.lat, p.lon) for p in points], precision=precision)


# ---------------------------------------------------------------------------
# Route assembly
# ---------------------------------------------------------------------------

def route_polyline(
    steps: List[RouteStep],
    precise_start: Optional[Coord] = None,
    precise_end: Optional[Coord] = None,
    precision: int = POLYLINE_PRECISION,
) -> List[Coord]:
    """
    Join the per-step polylines of a route into one remaining-route polyline.

    Consecutive steps share their boundary vertex; the duplicate is dropped.
    Steps without a polyline contribute nothing.
    """
    points: List[Coord] = []
    for step in steps:
        if not step.encoded_polyline:
            logger.debug("Step without polyline skipped while assembling route.")
            continue
        for p in iter_polyline(step.encoded_polyline, precision):
            if points and points[-1] == p:
                continue
            points.append(p)

    if precise_start is not None:
        points.insert(0, precise_start)
    if precise_end is not None:
        points.append(precise_end)
    return points
