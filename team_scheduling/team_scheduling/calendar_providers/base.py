"""
Base Calendar Provider Adapter

Defines the interface that all calendar provider adapters must implement.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import pytz
from dateutil.parser import isoparse

from team_scheduling.config import SchedulingSettings, get_settings


TokenProvider = Callable[[str], Awaitable[Optional[str]]]


class CalendarProviderError(Exception):
	"""Excepción para errores de proveedores de calendario."""
	pass


class CalendarProviderAdapter(ABC):
	"""
	Interfaz base para adaptadores de calendarios externos.

	Todos los adaptadores deben implementar fetch_busy_events. Las
	credenciales las entrega `token_provider(user_id)`; refrescar tokens
	no es responsabilidad del adaptador.
	"""

	provider_name = "base"

	def __init__(
		self,
		token_provider: TokenProvider,
		http_client: Optional[httpx.AsyncClient] = None,
		settings: Optional[SchedulingSettings] = None
	):
		self.token_provider = token_provider
		self.http_client = http_client
		self.settings = settings or get_settings()

	@abstractmethod
	async def fetch_busy_events(self, user_id: str, start: datetime, end: datetime) -> List[Dict[str, datetime]]:
		"""
		Obtiene los eventos ocupados del usuario en el proveedor.

		Args:
			user_id: usuario interno
			start: inicio del rango
			end: fin del rango

		Returns:
			list[dict]: [{"start": datetime, "end": datetime}, ...]

		Raises:
			CalendarProviderError: credencial ausente, error de red o respuesta no-2xx
		"""
		pass

	async def get_access_token(self, user_id: str) -> str:
		"""Token de acceso vigente o CalendarProviderError si no hay credencial."""
		token = await self.token_provider(user_id)
		if not token:
			raise CalendarProviderError(f"No {self.provider_name} access token for user {user_id}")
		return token

	async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
		"""
		GET que devuelve JSON, traduciendo fallos a CalendarProviderError.
		"""
		try:
			if self.http_client is not None:
				response = await self.http_client.get(url, params=params, headers=headers)
			else:
				async with httpx.AsyncClient(timeout=self.settings.provider_timeout_seconds) as client:
					response = await client.get(url, params=params, headers=headers)
		except httpx.HTTPError as e:
			raise CalendarProviderError(f"{self.provider_name} request failed: {e}") from e

		if response.status_code < 200 or response.status_code >= 300:
			raise CalendarProviderError(
				f"{self.provider_name} returned {response.status_code}: {response.text[:200]}"
			)

		try:
			payload = response.json()
		except ValueError as e:
			raise CalendarProviderError(f"{self.provider_name} returned invalid JSON") from e

		if not isinstance(payload, dict):
			raise CalendarProviderError(f"{self.provider_name} returned an unexpected payload")

		return payload


def parse_provider_datetime(value: Any, default_tz=pytz.UTC) -> datetime:
	"""
	Convierte un datetime/date ISO del proveedor a datetime con timezone.

	- "2026-10-20T09:00:00-05:00" -> con su offset
	- "2026-10-20T14:00:00.0000000" (naive) -> en default_tz
	- "2026-10-20" (evento de día completo) -> medianoche en default_tz
	"""
	if not value:
		raise CalendarProviderError("Missing event datetime")

	try:
		parsed = isoparse(str(value))
	except ValueError as e:
		raise CalendarProviderError(f"Invalid event datetime '{value}'") from e

	if parsed.tzinfo is None:
		parsed = default_tz.localize(parsed)

	return parsed
