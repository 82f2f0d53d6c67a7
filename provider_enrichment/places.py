"""Google Places API (New) client for text search and place details."""

import logging
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_MAX_RESULTS, DEFAULT_TIMEOUT_SECONDS
from .errors import PlacesAPIError
from .records import defined_only, valid_location

LOGGER = logging.getLogger(__name__)

SEARCH_TEXT_ENDPOINT = "https://places.googleapis.com/v1/places:searchText"
DETAILS_ENDPOINT = "https://places.googleapis.com/v1/places/{place_id}"

PLACE_FIELDS = (
    "id",
    "displayName",
    "formattedAddress",
    "location",
    "googleMapsUri",
    "internationalPhoneNumber",
)
SEARCH_FIELD_MASK = ",".join(f"places.{f}" for f in PLACE_FIELDS)
DETAILS_FIELD_MASK = ",".join(PLACE_FIELDS)


def first_region_code(country_bias: Optional[str]) -> Optional[str]:
    """Return the first entry of a comma-separated country bias list.

    The search endpoint takes a single regionCode, so "PH,TH" biases to PH only.
    """
    if not country_bias:
        return None
    for part in country_bias.split(","):
        part = part.strip()
        if part:
            return part
    return None


def _text(value: Any) -> Optional[str]:
    # displayName comes back as {"text": ..., "languageCode": ...}
    if isinstance(value, Mapping):
        value = value.get("text")
    if isinstance(value, str) and value:
        return value
    return None


def _location(payload: Mapping[str, Any]) -> Optional[Dict[str, float]]:
    loc = payload.get("location")
    if isinstance(loc, Mapping):
        candidate = {"lat": loc.get("latitude"), "lng": loc.get("longitude")}
        if valid_location(candidate):
            return candidate
    geometry = payload.get("geometry")
    if isinstance(geometry, Mapping):
        loc = geometry.get("location")
        if isinstance(loc, Mapping):
            candidate = {"lat": loc.get("lat"), "lng": loc.get("lng")}
            if valid_location(candidate):
                return candidate
    return None


def to_place_identity(payload: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Normalise a place payload into a PlaceIdentity dict.

    Accepts both the Places API (New) field names and the legacy Places API
    ones. Only fields actually present are included; a payload without a
    place identifier yields None.
    """
    if not isinstance(payload, Mapping):
        return None
    place_id = _text(payload.get("id")) or _text(payload.get("place_id"))
    if not place_id:
        return None
    return defined_only(
        [
            ("placeId", place_id),
            ("url", _text(payload.get("googleMapsUri")) or _text(payload.get("url"))),
            ("formattedName", _text(payload.get("displayName")) or _text(payload.get("name"))),
            (
                "formattedAddress",
                _text(payload.get("formattedAddress")) or _text(payload.get("formatted_address")),
            ),
            (
                "internationalPhone",
                _text(payload.get("internationalPhoneNumber"))
                or _text(payload.get("international_phone_number")),
            ),
            ("location", _location(payload)),
        ]
    )


class PlacesClient:
    """Minimal Places API (New) client: text search plus place details."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_results: int = DEFAULT_MAX_RESULTS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._max_results = max_results
        self._session = session or requests.Session()
        self._request_count = 0

    @property
    def request_count(self) -> int:
        return self._request_count

    def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        self._request_count += 1
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.Timeout as e:
            raise PlacesAPIError(f"timed out after {self._timeout:g}s: {e}") from e
        except requests.RequestException as e:
            raise PlacesAPIError(f"request failed: {e}") from e

        if not response.ok:
            raise PlacesAPIError(
                f"HTTP {response.status_code}: {response.text.strip()[:500]}",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise PlacesAPIError(f"invalid JSON response: {e}", status=response.status_code) from e

    def search_text(self, query: str, region_code: Optional[str] = None) -> List[Dict[str, Any]]:
        """Run a text search and return the ranked candidate list (possibly empty)."""
        body: Dict[str, Any] = {"textQuery": query, "maxResultCount": self._max_results}
        if region_code:
            body["regionCode"] = region_code
        LOGGER.debug("searchText %r region=%s", query, region_code)
        payload = self._send(
            "POST",
            SEARCH_TEXT_ENDPOINT,
            json=body,
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": self._api_key,
                "X-Goog-FieldMask": SEARCH_FIELD_MASK,
            },
        )
        places = payload.get("places") if isinstance(payload, Mapping) else None
        return list(places) if isinstance(places, list) else []

    def get_details(self, place_id: str) -> Optional[Dict[str, Any]]:
        """Fetch full details for one place; None when the response is empty."""
        LOGGER.debug("details %s", place_id)
        payload = self._send(
            "GET",
            DETAILS_ENDPOINT.format(place_id=quote(place_id, safe="")),
            params={"fields": DETAILS_FIELD_MASK},
            headers={"X-Goog-Api-Key": self._api_key},
        )
        if isinstance(payload, Mapping) and payload:
            return dict(payload)
        return None

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "PlacesClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
