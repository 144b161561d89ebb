"""
Pure reshaping of upstream payloads into entrypoint output.

Upstream fields may be null or of an unexpected type; every accessor here
treats those as empty rather than failing.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import math
from typing import Any, Dict, List, Mapping, Optional

MAX_ASTEROIDS = 20
MAX_HAZARDOUS = 5
EXPLANATION_LIMIT = 500


def _as_dict(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _records(value: Any) -> List[Mapping[str, Any]]:
    return [item for item in _as_list(value) if isinstance(item, Mapping)]


def parse_float(value: Any) -> Optional[float]:
    """Convert an upstream numeric string to float, None if absent or malformed."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def truncate(text: Any, limit: int = EXPLANATION_LIMIT) -> str:
    text = "" if text is None else str(text)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def group_by_craft(people: Any) -> Dict[str, List[str]]:
    """Map each spacecraft to the names aboard, in first-seen order."""
    by_craft: Dict[str, List[str]] = {}
    for person in _records(people):
        by_craft.setdefault(person.get("craft") or "Unknown", []).append(person.get("name") or "")
    return by_craft


def distinct_crafts(people: Any) -> List[str]:
    return list(group_by_craft(people))


def _numeric_key(value: Any) -> float:
    number = parse_float(value)
    if number is None or math.isnan(number):
        return math.inf
    return number


def sort_by_numeric(records: Any, field: str) -> List[Mapping[str, Any]]:
    """
    Sort records ascending by a numeric field.

    Records whose field is missing, null or not a number sort last; ties keep
    their input order.
    """
    return sorted(records, key=lambda record: _numeric_key(record.get(field)))


def _first_approach(neo: Mapping[str, Any]) -> Mapping[str, Any]:
    approaches = _records(neo.get("close_approach_data"))
    return approaches[0] if approaches else {}


def _diameter_km(neo: Mapping[str, Any]) -> Mapping[str, Any]:
    return _as_dict(_as_dict(neo.get("estimated_diameter")).get("kilometers"))


def flatten_asteroid(neo: Mapping[str, Any]) -> Dict[str, Any]:
    approach = _first_approach(neo)
    diameter = _diameter_km(neo)
    return {
        "name": neo.get("name"),
        "id": neo.get("id"),
        "diameter_km": {
            "min": diameter.get("estimated_diameter_min"),
            "max": diameter.get("estimated_diameter_max"),
        },
        "isPotentiallyHazardous": bool(neo.get("is_potentially_hazardous_asteroid")),
        "approachDate": approach.get("close_approach_date"),
        "missDistance_km": parse_float(_as_dict(approach.get("miss_distance")).get("kilometers")),
        "relativeVelocity_kph": parse_float(
            _as_dict(approach.get("relative_velocity")).get("kilometers_per_hour")
        ),
    }


def _neos(near_earth_objects: Any) -> List[Mapping[str, Any]]:
    return [
        neo
        for neos in _as_dict(near_earth_objects).values()
        for neo in _records(neos)
    ]


def flatten_asteroids(near_earth_objects: Any) -> List[Dict[str, Any]]:
    """Flatten a date-keyed NEO feed and order it closest approach first."""
    return sort_by_numeric([flatten_asteroid(neo) for neo in _neos(near_earth_objects)], "missDistance_km")


def hazardous_summary(feed: Mapping[str, Any], limit: int = MAX_HAZARDOUS) -> Dict[str, Any]:
    hazardous = [
        {
            "name": neo.get("name"),
            "diameter_km_max": _diameter_km(neo).get("estimated_diameter_max"),
            "approachDate": _first_approach(neo).get("close_approach_date"),
        }
        for neo in _neos(feed.get("near_earth_objects"))
        if neo.get("is_potentially_hazardous_asteroid")
    ]

    return {
        "totalTracked": feed.get("element_count"),
        "hazardousObjects": len(hazardous),
        "hazardousList": hazardous[:limit],
    }


def iss_position(payload: Mapping[str, Any]) -> Dict[str, Optional[float]]:
    position = _as_dict(payload.get("iss_position"))
    return {
        "latitude": parse_float(position.get("latitude")),
        "longitude": parse_float(position.get("longitude")),
    }
