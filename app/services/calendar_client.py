"""
Calendar/groupware client (Microsoft Graph, client-credentials flow)

Every call uses a bounded timeout; a timeout is reported as a CalendarError
like any other failure.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from zoneinfo import ZoneInfo

import httpx

from app.core.config import settings
from app.core.constants import CALENDAR_TIMEZONE
from app.utils.datetime_utils import ensure_utc

logger = logging.getLogger(__name__)

_TOKEN_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"
_SCOPE = "https://graph.microsoft.com/.default"


class CalendarError(Exception):
    """Raised for any failed or timed-out calendar call"""


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    ical_uid: Optional[str] = None


def _graph_datetime(dt: datetime) -> Dict[str, str]:
    local = ensure_utc(dt).astimezone(ZoneInfo(CALENDAR_TIMEZONE))
    return {"dateTime": local.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": CALENDAR_TIMEZONE}


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    """Decoded JSON object of a 2xx reply; anything else is a CalendarError"""
    try:
        data = response.json()
    except ValueError as e:
        raise CalendarError(f"Calendar returned a non-JSON reply ({response.status_code})") from e
    if not isinstance(data, dict):
        raise CalendarError(f"Calendar returned an unexpected reply ({response.status_code})")
    return data


class GraphCalendarClient:
    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        base_url: str,
        timeout: float,
    ):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": _SCOPE,
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(_TOKEN_URL.format(tenant=self.tenant_id), data=data)
        except httpx.HTTPError as e:
            raise CalendarError(f"Token request failed: {e}") from e

        if response.status_code >= 400:
            raise CalendarError(f"Token request returned {response.status_code}")

        body = _json_body(response)
        token = body.get("access_token")
        if not token:
            raise CalendarError("Token response did not contain an access token")
        self._token = token
        # Refresh a minute early
        self._token_expires_at = time.monotonic() + max(int(body.get("expires_in", 3600)) - 60, 0)
        return token

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise CalendarError(f"Calendar call timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise CalendarError(f"Calendar call failed: {method} {path}: {e}") from e

        if response.status_code >= 400:
            raise CalendarError(f"Calendar call {method} {path} returned {response.status_code}: {response.text[:500]}")
        return response

    @staticmethod
    def _mailbox(resource_email: str) -> str:
        return f"/users/{quote(resource_email)}"

    def is_slot_free(self, resource_email: str, start: datetime, end: datetime) -> bool:
        """Free/busy lookup for the room mailbox"""
        body = {
            "schedules": [resource_email],
            "startTime": _graph_datetime(start),
            "endTime": _graph_datetime(end),
            "availabilityViewInterval": 15,
        }
        response = self._request("POST", f"{self._mailbox(resource_email)}/calendar/getSchedule", json=body)
        schedules = _json_body(response).get("value", [])
        if not schedules:
            return True
        items = schedules[0].get("scheduleItems") or []
        return not any(item.get("status") in ("busy", "oof", "tentative") for item in items)

    def create_event(
        self,
        resource_email: str,
        subject: str,
        start: datetime,
        end: datetime,
        body: Optional[str] = None,
        location: Optional[str] = None,
        attendees: Optional[List[str]] = None,
    ) -> CalendarEvent:
        payload = {
            "subject": subject,
            "body": {"contentType": "HTML", "content": body or ""},
            "start": _graph_datetime(start),
            "end": _graph_datetime(end),
            "attendees": [
                {"emailAddress": {"address": address}, "type": "required"}
                for address in (attendees or [])
            ],
            "allowNewTimeProposals": False,
        }
        if location:
            payload["location"] = {"displayName": location}

        response = self._request("POST", f"{self._mailbox(resource_email)}/events", json=payload)
        data = _json_body(response)
        if not data.get("id"):
            raise CalendarError("Calendar did not return an event id")
        return CalendarEvent(id=data["id"], ical_uid=data.get("iCalUId"))

    def update_event(
        self,
        resource_email: str,
        event_id: str,
        subject: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        body: Optional[str] = None,
    ) -> None:
        payload: Dict[str, Any] = {}
        if subject is not None:
            payload["subject"] = subject
        if body is not None:
            payload["body"] = {"contentType": "HTML", "content": body}
        if start is not None:
            payload["start"] = _graph_datetime(start)
        if end is not None:
            payload["end"] = _graph_datetime(end)
        if payload:
            self._request("PATCH", f"{self._mailbox(resource_email)}/events/{quote(event_id)}", json=payload)

    def cancel_event(self, resource_email: str, event_id: str) -> None:
        self._request("DELETE", f"{self._mailbox(resource_email)}/events/{quote(event_id)}")


_client: Optional[GraphCalendarClient] = None


def get_calendar_client() -> Optional[GraphCalendarClient]:
    """Shared client, or None when the calendar integration is not configured"""
    global _client
    if not settings.is_graph_configured():
        return None
    if _client is None:
        _client = GraphCalendarClient(
            tenant_id=settings.AZURE_TENANT_ID,
            client_id=settings.AZURE_CLIENT_ID,
            client_secret=settings.AZURE_CLIENT_SECRET,
            base_url=settings.GRAPH_API_URL,
            timeout=settings.GRAPH_TIMEOUT_SECONDS,
        )
    return _client
