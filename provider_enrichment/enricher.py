"""Resolve Google Places identity for curated provider records.

Records are processed one at a time with a fixed courtesy delay between
lookups. A record that cannot be resolved (no candidate, failed details
call, HTTP error or timeout) is passed through unchanged and the run goes on;
the ids of such records are collected so they can be retried with --only.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol

from .config import DEFAULT_DELAY_SECONDS
from .errors import PlacesAPIError
from .places import first_region_code, to_place_identity
from .records import build_record, has_place_id, overlay

LOGGER = logging.getLogger(__name__)

QUERY_DELIMITER = ", "


class PlacesLookup(Protocol):
    def search_text(self, query: str, region_code: Optional[str] = None) -> List[Dict[str, Any]]:
        ...

    def get_details(self, place_id: str) -> Optional[Dict[str, Any]]:
        ...


@dataclass
class EnrichStats:
    enriched: int = 0
    skipped: int = 0
    unchanged: int = 0
    failed_ids: List[str] = field(default_factory=list)


def compose_query(record: Mapping[str, Any]) -> str:
    """Build the text query: name, city, region tag (if any) and country."""
    parts = [record.get(k) for k in ("name", "city", "regionTag", "country")]
    return QUERY_DELIMITER.join(str(p).strip() for p in parts if p and str(p).strip())


class ProviderEnricher:
    """Attach a `gmaps` PlaceIdentity block to records that lack one."""

    def __init__(
        self,
        client: PlacesLookup,
        country_bias: Optional[str] = None,
        only: Optional[Iterable[str]] = None,
        force: bool = False,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.region_code = first_region_code(country_bias)
        self.only = set(only) if only is not None else None
        self.force = force
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.stats = EnrichStats()

    def should_skip(self, record: Mapping[str, Any]) -> bool:
        if self.only is not None and record.get("id") not in self.only:
            return True
        return has_place_id(record) and not self.force

    def enrich(self, records: List[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        """Return a copy of `records` in the same order with identities resolved."""
        self.stats = EnrichStats()
        out: List[Mapping[str, Any]] = []
        looked_up = False
        for record in records:
            if self.should_skip(record):
                self.stats.skipped += 1
                out.append(record)
                continue
            if looked_up and self.delay_seconds > 0:
                self._sleep(self.delay_seconds)
            looked_up = True
            out.append(self.enrich_one(record))
        return out

    def enrich_one(self, record: Mapping[str, Any]) -> Mapping[str, Any]:
        """Resolve one record; on any per-record failure return it unchanged."""
        record_id = record.get("id")
        query = compose_query(record)
        try:
            identity = self._resolve(record_id, query)
        except PlacesAPIError as e:
            LOGGER.warning("enrich failed for %s: %s", record_id, e)
            identity = None

        if identity is None:
            self.stats.unchanged += 1
            self.stats.failed_ids.append(str(record_id))
            return record

        self.stats.enriched += 1
        LOGGER.info("enriched %s -> %s", record_id, identity["placeId"])
        return build_record(
            record,
            record.get("lat"),
            record.get("lng"),
            overlay(record.get("gmaps"), identity),
        )

    def _resolve(self, record_id: Any, query: str) -> Optional[Dict[str, Any]]:
        candidates = self.client.search_text(query, self.region_code)
        if not candidates:
            LOGGER.warning("no search candidate for %s (query %r)", record_id, query)
            return None

        best = candidates[0]
        place_id = None
        if isinstance(best, Mapping):
            place_id = best.get("id") or best.get("place_id") or best.get("placeId")
        if not isinstance(place_id, str) or not place_id:
            LOGGER.warning("top candidate for %s has no place id", record_id)
            return None

        details = self.client.get_details(place_id)
        identity = to_place_identity(details)
        if identity is None:
            LOGGER.warning("no details returned for %s (place %s)", record_id, place_id)
            return None
        return identity


def enrich_providers(
    records: List[Mapping[str, Any]], client: PlacesLookup, **options: Any
) -> List[Mapping[str, Any]]:
    """Functional shortcut around ProviderEnricher(client, **options).enrich(records)."""
    return ProviderEnricher(client, **options).enrich(records)
