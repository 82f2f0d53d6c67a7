"""Fold an enriched provider file back onto the curated base dataset."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .records import build_record, overlay, valid_location

LOGGER = logging.getLogger(__name__)


def index_by_id(records: Iterable[Any]) -> Dict[str, Mapping[str, Any]]:
    """Map records by `id`. Entries without a string id are ignored; later duplicates win."""
    index: Dict[str, Mapping[str, Any]] = {}
    for record in records:
        if not isinstance(record, Mapping):
            continue
        record_id = record.get("id")
        if isinstance(record_id, str) and record_id:
            index[record_id] = record
    return index


def merge_provider(
    base: Mapping[str, Any],
    enriched: Optional[Mapping[str, Any]],
    overwrite_geo: bool = False,
) -> Mapping[str, Any]:
    """Overlay the enriched `gmaps` block (and optionally its location) onto `base`.

    Descriptive fields always come from `base`. Base lat/lng are replaced only
    when `overwrite_geo` is set and the enriched location is numeric.
    """
    if enriched is None:
        return base

    enriched_gmaps = enriched.get("gmaps")
    if isinstance(enriched_gmaps, Mapping):
        gmaps = overlay(base.get("gmaps"), enriched_gmaps) or None
    else:
        gmaps = base.get("gmaps")

    lat, lng = base.get("lat"), base.get("lng")
    if overwrite_geo and isinstance(enriched_gmaps, Mapping):
        location = enriched_gmaps.get("location")
        if valid_location(location):
            lat, lng = location["lat"], location["lng"]

    return build_record(base, lat, lng, gmaps)


def merge_providers(
    base_records: List[Mapping[str, Any]],
    enriched_records: Iterable[Any],
    overwrite_geo: bool = False,
) -> List[Mapping[str, Any]]:
    """Merge every base record with its enriched counterpart, keeping base order."""
    enriched_by_id = index_by_id(enriched_records)
    base_ids = {r.get("id") for r in base_records}
    orphans = [i for i in enriched_by_id if i not in base_ids]
    if orphans:
        LOGGER.debug("ignoring %d enriched record(s) not in base: %s", len(orphans), ", ".join(orphans))
    return [
        merge_provider(b, enriched_by_id.get(b.get("id")), overwrite_geo=overwrite_geo)
        for b in base_records
    ]
