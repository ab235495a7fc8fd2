"""
Google Calendar Adapter

Reads busy events from the primary Google calendar (Calendar API v3,
recurring events expanded server-side with singleEvents=true).
"""

from datetime import datetime
from typing import Dict, List

import pytz

from .base import CalendarProviderAdapter, parse_provider_datetime


class GoogleCalendarAdapter(CalendarProviderAdapter):
	"""Adapter para Google Calendar."""

	provider_name = "google"

	async def fetch_busy_events(self, user_id: str, start: datetime, end: datetime) -> List[Dict[str, datetime]]:
		"""
		Lista eventos del calendario primario en [start, end).

		Se ignoran eventos cancelados y los marcados como "transparent"
		(mostrados como libres en Google).
		"""
		token = await self.get_access_token(user_id)
		url = f"{self.settings.google_api_base_url}/calendars/primary/events"
		headers = {"Authorization": f"Bearer {token}"}
		params = {
			"timeMin": start.astimezone(pytz.UTC).isoformat(),
			"timeMax": end.astimezone(pytz.UTC).isoformat(),
			"singleEvents": "true",
			"orderBy": "startTime",
		}

		busy: List[Dict[str, datetime]] = []

		while True:
			payload = await self.get_json(url, params=params, headers=headers)

			for item in payload.get("items", []):
				if item.get("status") == "cancelled" or item.get("transparency") == "transparent":
					continue

				item_start = item.get("start", {})
				item_end = item.get("end", {})
				busy.append({
					"start": parse_provider_datetime(item_start.get("dateTime") or item_start.get("date")),
					"end": parse_provider_datetime(item_end.get("dateTime") or item_end.get("date")),
				})

			page_token = payload.get("nextPageToken")
			if not page_token:
				break
			params = dict(params, pageToken=page_token)

		return busy
