"""
Microsoft Outlook Adapter

Reads busy events through Microsoft Graph calendarView, with times
normalized to UTC by the Prefer header.
"""

from datetime import datetime
from typing import Dict, List

import pytz

from .base import CalendarProviderAdapter, parse_provider_datetime


class OutlookCalendarAdapter(CalendarProviderAdapter):
	"""Adapter para Microsoft Outlook (Graph API)."""

	provider_name = "outlook"

	async def fetch_busy_events(self, user_id: str, start: datetime, end: datetime) -> List[Dict[str, datetime]]:
		"""
		Lista eventos de calendarView en [start, end), siguiendo @odata.nextLink.

		Se ignoran los eventos cancelados y los que Outlook muestra como "free".
		"""
		token = await self.get_access_token(user_id)
		url = f"{self.settings.microsoft_graph_base_url}/me/calendarView"
		headers = {
			"Authorization": f"Bearer {token}",
			"Prefer": 'outlook.timezone="UTC"',
		}
		params = {
			"startDateTime": start.astimezone(pytz.UTC).isoformat(),
			"endDateTime": end.astimezone(pytz.UTC).isoformat(),
			"$top": str(self.settings.outlook_page_size),
			"$select": "subject,start,end,isAllDay,isCancelled,showAs",
		}

		busy: List[Dict[str, datetime]] = []

		while url:
			payload = await self.get_json(url, params=params, headers=headers)

			for item in payload.get("value", []):
				if item.get("isCancelled") or item.get("showAs") == "free":
					continue

				busy.append({
					"start": parse_provider_datetime(item.get("start", {}).get("dateTime")),
					"end": parse_provider_datetime(item.get("end", {}).get("dateTime")),
				})

			# nextLink ya incluye todos los parámetros
			url = payload.get("@odata.nextLink")
			params = None

		return busy
