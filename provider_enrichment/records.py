"""Provider record helpers and JSON dataset I/O.

Records are kept as plain dicts in the same shape as the dataset files:

  {
    'id': str, 'name': str, 'country': str, 'city': str,
    'regionTag': str?, 'phone': str?, 'policy': str?, 'caution': str?,
    'lat': float?, 'lng': float?,
    'gmaps': {
      'placeId': str?, 'url': str?, 'formattedName': str?,
      'formattedAddress': str?, 'internationalPhone': str?,
      'location': {'lat': float, 'lng': float}?
    }?
  }

Optional keys are omitted rather than written as null.
"""

import json
import math
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import DatasetError

REQUIRED_FIELDS = ("id", "name", "country", "city")
CURATED_FIELDS = ("regionTag", "phone", "policy", "caution")
IDENTITY_FIELDS = (
    "placeId",
    "url",
    "formattedName",
    "formattedAddress",
    "internationalPhone",
    "location",
)
_KNOWN_FIELDS = REQUIRED_FIELDS + CURATED_FIELDS + ("lat", "lng", "gmaps")


def defined_only(pairs: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Build a dict from (key, value) pairs, leaving out keys whose value is None."""
    return {k: v for k, v in pairs if v is not None}


def overlay(base: Optional[Mapping[str, Any]], top: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge two partial objects; defined values in `top` win field by field."""
    merged = defined_only(base.items()) if isinstance(base, Mapping) else {}
    if isinstance(top, Mapping):
        merged.update(defined_only(top.items()))
    return merged


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def valid_location(value: Any) -> bool:
    """True for a mapping carrying finite numeric `lat` and `lng`."""
    if not isinstance(value, Mapping):
        return False
    return _is_number(value.get("lat")) and _is_number(value.get("lng"))


def has_place_id(record: Mapping[str, Any]) -> bool:
    gmaps = record.get("gmaps")
    return isinstance(gmaps, Mapping) and bool(gmaps.get("placeId"))


def build_record(
    base: Mapping[str, Any],
    lat: Optional[float],
    lng: Optional[float],
    gmaps: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Rebuild `base` in canonical key order with the given geometry and identity.

    Descriptive fields always come from `base`. Keys the pipeline does not know
    about are carried over after the known ones, in their original order.
    """
    result = defined_only((k, base.get(k)) for k in REQUIRED_FIELDS + CURATED_FIELDS)
    result.update(defined_only([("lat", lat), ("lng", lng), ("gmaps", gmaps)]))
    for k, v in base.items():
        if k not in _KNOWN_FIELDS and v is not None:
            result[k] = v
    return result


def missing_required(record: Any) -> List[str]:
    if not isinstance(record, Mapping):
        return list(REQUIRED_FIELDS)
    return [k for k in REQUIRED_FIELDS if not isinstance(record.get(k), str) or not record.get(k)]


def malformed_optional(record: Mapping[str, Any]) -> List[str]:
    """Names of optional fields present with the wrong type."""
    bad = [k for k in ("lat", "lng") if record.get(k) is not None and not _is_number(record.get(k))]
    gmaps = record.get("gmaps")
    if gmaps is not None and not isinstance(gmaps, Mapping):
        bad.append("gmaps")
    return bad


def load_providers(path: str, validate: bool = True) -> List[Dict[str, Any]]:
    """Load a provider dataset (a JSON array of records).

    Args:
      path: dataset file.
      validate: when True every entry must be an object carrying the required
        fields, with numeric lat/lng and an object gmaps when present; the
        first offending entry raises DatasetError.

    Returns:
      The list of records in file order.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise DatasetError(f"dataset not found: {path}") from None
    except json.JSONDecodeError as e:
        raise DatasetError(f"malformed JSON in {path}: {e}") from None
    except OSError as e:
        raise DatasetError(f"cannot read {path}: {e}") from None

    if not isinstance(data, list):
        raise DatasetError(f"{path} must contain a JSON array of provider records")

    if validate:
        for i, record in enumerate(data):
            missing = missing_required(record)
            if missing:
                ident = record.get("id") if isinstance(record, Mapping) else None
                label = f"id={ident!r}" if ident else f"index {i}"
                raise DatasetError(
                    f"{path}: record at {label} is missing required field(s): {', '.join(missing)}"
                )
            malformed = malformed_optional(record)
            if malformed:
                raise DatasetError(
                    f"{path}: record at id={record['id']!r} has malformed field(s): {', '.join(malformed)}"
                )
    return data


def dumps_providers(records: List[Mapping[str, Any]]) -> str:
    return json.dumps(records, ensure_ascii=False, indent=2) + "\n"


def write_providers(path: str, records: List[Mapping[str, Any]]) -> None:
    """Write the whole dataset to `path` in one go, creating parent dirs."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    payload = dumps_providers(records)
    with open(path, "w", encoding="utf-8") as f:
        f.write(payload)
