"""Minimal IVAO API client used to resolve controller identities."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, Optional, cast

import httpx
from pydantic import SecretStr

from ..core.constants import NO_RATING, rating_name

logger = logging.getLogger(__name__)

# Upstream statuses that mean "try again later" rather than "no such user"
UNAVAILABLE_STATUSES = frozenset({429, 502, 503, 504})


class IvaoError(RuntimeError):
    """Raised when the IVAO API responds with an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        unreachable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.unreachable = unreachable

    @property
    def is_unavailable(self) -> bool:
        """Rate limited, down, timed out or unreachable."""
        return self.unreachable or self.status_code in UNAVAILABLE_STATUSES


@dataclass(frozen=True)
class IvaoProfile:
    """The subset of an IVAO user record the booking service keeps."""

    vid: str
    name: str
    rating: int
    rating_level: str
    division_id: Optional[str] = None
    country_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], requested_vid: str) -> "IvaoProfile":
        atc_rating = (payload.get("rating") or {}).get("atcRating") or {}
        rating = int(atc_rating.get("id") or NO_RATING)
        return cls(
            vid=str(payload.get("id") or requested_vid),
            name=payload.get("publicNickname") or f"User {requested_vid}",
            rating=rating,
            rating_level=atc_rating.get("shortName") or rating_name(rating),
            division_id=payload.get("divisionId") or None,
            country_id=payload.get("countryId") or None,
        )


class IvaoClient:
    """Thin client for the IVAO v2 REST API."""

    def __init__(
        self,
        *,
        api_key: str | SecretStr,
        base_url: str = "https://api.ivao.aero/v2",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        if not secret_value:
            raise ValueError("IVAO API key must be provided")

        self._api_key = secret_value
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def get_user(self, vid: str) -> Optional[IvaoProfile]:
        """
        Fetch a user by VID.

        Returns:
            The profile, or None when IVAO answers 404

        Raises:
            IvaoError: On any other failure; check ``is_unavailable``
        """
        if not vid:
            raise ValueError("vid must be provided")
        payload = self.request("GET", f"/users/{vid}")
        if payload is None:
            return None
        return IvaoProfile.from_payload(payload, vid)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
    ) -> Optional[Dict[str, Any]]:
        """Perform a raw request; None on 404, parsed JSON otherwise."""

        url = f"{self._base_url}{path}"
        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            headers={"apiKey": self._api_key, "Accept": "application/json"},
        ) as client:
            try:
                response = client.request(method, url, params=params)
                if response.status_code == 404:
                    return None
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                log = logger.warning if status in UNAVAILABLE_STATUSES else logger.error
                log(
                    "IVAO API error %s for %s %s: %s",
                    status,
                    method,
                    path,
                    exc.response.text[:500],
                )
                raise IvaoError(
                    f"IVAO API responded with status {status}", status_code=status
                ) from exc
            except httpx.RequestError as exc:
                logger.warning("IVAO request failure for %s %s: %s", method, path, str(exc))
                raise IvaoError("Failed to reach IVAO API", unreachable=True) from exc

        try:
            return cast(Dict[str, Any], response.json())
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from IVAO for %s %s: %s", method, path, response.text[:500])
            raise IvaoError("Received malformed JSON from IVAO") from exc


class FakeIvaoClient(IvaoClient):
    """In-memory stand-in for local development and tests."""

    def __init__(self, users: Optional[Dict[str, IvaoProfile]] = None) -> None:
        super().__init__(api_key="fake-ivao-key")
        self._users: Dict[str, IvaoProfile] = dict(users or {})
        self._logger = logging.getLogger(self.__class__.__name__)

    def add_user(self, profile: IvaoProfile) -> None:
        self._users[profile.vid] = profile

    def get_user(self, vid: str) -> Optional[IvaoProfile]:
        profile = self._users.get(vid)
        self._logger.debug("Fake IVAO lookup", extra={"vid": vid, "found": profile is not None})
        return profile
