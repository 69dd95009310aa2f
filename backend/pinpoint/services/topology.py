"""
Decoding of TopoJSON documents into shapely geometries.

Only the parts of the format the world-atlas files use are supported:
quantized or raw arcs, Polygon / MultiPolygon / GeometryCollection objects.

TopoJSON edges are great-circle arcs, while shapely tests points in the
flat lng/lat plane. Every edge is therefore densified along its great
circle before polygons are built, so a planar `covers` on the result
matches spherical containment to within a few tens of metres.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from shapely.geometry import MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.prepared import PreparedGeometry, prep

Position = Tuple[float, float]

# Longest arc, in degrees, left between two vertices after densification
MAX_EDGE_DEGREES = 0.5


@dataclass(frozen=True)
class GeoFeature:
    """One decoded feature with its prepared geometry for fast point tests."""
    id: Optional[str]
    name: Optional[str]
    geometry: BaseGeometry
    prepared: PreparedGeometry = field(repr=False, compare=False)

    def covers(self, lng: float, lat: float) -> bool:
        return self.prepared.covers(Point(lng, lat))


def decode_arcs(topology: Dict[str, Any]) -> List[List[Position]]:
    """Turn the topology's arcs into absolute lng/lat positions."""
    transform = topology.get("transform")
    arcs = []
    for arc in topology["arcs"]:
        if transform:
            sx, sy = transform["scale"]
            tx, ty = transform["translate"]
            x = y = 0
            points = []
            for position in arc:
                x += position[0]
                y += position[1]
                points.append((x * sx + tx, y * sy + ty))
        else:
            points = [(float(p[0]), float(p[1])) for p in arc]
        arcs.append(points)
    return arcs


def _unit_vector(position: Position) -> Tuple[float, float, float]:
    lng, lat = math.radians(position[0]), math.radians(position[1])
    return (math.cos(lat) * math.cos(lng), math.cos(lat) * math.sin(lng), math.sin(lat))


def great_circle_points(start: Position, end: Position, max_degrees: float = MAX_EDGE_DEGREES) -> List[Position]:
    """
    Positions strictly between start and end on the shorter great-circle arc,
    spaced at most ``max_degrees`` apart.

    Edges that are already straight in lng/lat come back without extra
    vertices: meridians, edges touching a pole, and edges spanning more than
    180 degrees of longitude, which only occur along the antimeridian cut.
    """
    if start[0] == end[0] or abs(end[0] - start[0]) > 180:
        return []
    if abs(start[1]) == 90 or abs(end[1]) == 90:
        return []

    a, b = _unit_vector(start), _unit_vector(end)
    dot = max(-1.0, min(1.0, sum(p * q for p, q in zip(a, b))))
    angle = math.acos(dot)
    steps = math.ceil(math.degrees(angle) / max_degrees)
    # Antipodal ends have no unique great circle
    if steps < 2 or math.pi - angle < 1e-9:
        return []

    sin_angle = math.sin(angle)
    points = []
    for i in range(1, steps):
        t = i / steps
        wa = math.sin((1 - t) * angle) / sin_angle
        wb = math.sin(t * angle) / sin_angle
        x, y, z = (wa * p + wb * q for p, q in zip(a, b))
        points.append((math.degrees(math.atan2(y, x)), math.degrees(math.atan2(z, math.hypot(x, y)))))
    return points


def densify(arc: List[Position], max_degrees: float = MAX_EDGE_DEGREES) -> List[Position]:
    """Insert great-circle vertices into every edge of an arc."""
    if len(arc) < 2:
        return list(arc)
    dense = [arc[0]]
    for start, end in zip(arc, arc[1:]):
        dense.extend(great_circle_points(start, end, max_degrees))
        dense.append(end)
    return dense


def _ring(indexes: List[int], arcs: List[List[Position]]) -> List[Position]:
    points: List[Position] = []
    for index in indexes:
        # A negative index ~i means arc i traversed backwards
        arc = arcs[~index][::-1] if index < 0 else arcs[index]
        # Consecutive arcs share their joining point
        points.extend(arc if not points else arc[1:])
    return points


def _polygon(rings: List[List[int]], arcs: List[List[Position]]) -> Optional[Polygon]:
    decoded = [_ring(ring, arcs) for ring in rings]
    decoded = [ring for ring in decoded if len(ring) >= 4]
    if not decoded:
        return None
    return Polygon(decoded[0], decoded[1:])


def _geometry(obj: Dict[str, Any], arcs: List[List[Position]]) -> Optional[BaseGeometry]:
    kind = obj.get("type")
    if kind == "Polygon":
        return _polygon(obj["arcs"], arcs)
    if kind == "MultiPolygon":
        parts = [_polygon(rings, arcs) for rings in obj["arcs"]]
        parts = [p for p in parts if p is not None]
        return MultiPolygon(parts) if parts else None
    # Points and lines never contain anything, and null geometries carry no shape
    return None


def decode_features(topology: Dict[str, Any], object_name: str) -> List[GeoFeature]:
    """Decode one named object of a topology into a flat list of area features."""
    if not isinstance(topology, dict) or topology.get("type") != "Topology":
        raise ValueError("document is not a TopoJSON topology")
    try:
        root = topology["objects"][object_name]
    except KeyError:
        raise ValueError(f"topology has no object named '{object_name}'")

    arcs = [densify(arc) for arc in decode_arcs(topology)]
    members = root.get("geometries", []) if root.get("type") == "GeometryCollection" else [root]

    features = []
    for member in members:
        geometry = _geometry(member, arcs)
        if geometry is None or geometry.is_empty:
            continue
        properties = member.get("properties") or {}
        feature_id = member.get("id")
        features.append(GeoFeature(
            id=str(feature_id) if feature_id is not None else None,
            name=properties.get("name"),
            geometry=geometry,
            prepared=prep(geometry),
        ))
    return features
