"""
Calendar Provider Adapter Factory

Factory pattern to get the correct adapter based on provider.
"""

from typing import Optional

import httpx

from team_scheduling.config import SchedulingSettings

from .base import CalendarProviderAdapter, TokenProvider


def get_adapter(
	provider: str,
	token_provider: TokenProvider,
	http_client: Optional[httpx.AsyncClient] = None,
	settings: Optional[SchedulingSettings] = None
) -> CalendarProviderAdapter:
	"""
	Factory para obtener el adapter correcto según proveedor.

	Args:
		provider: "google_calendar" o "microsoft_outlook"
		token_provider: callable async user_id -> access token (o None)
		http_client: cliente httpx compartido (opcional)
		settings: configuración (por defecto get_settings())

	Returns:
		CalendarProviderAdapter: instancia del adapter

	Raises:
		ValueError: si provider no es soportado
	"""
	if provider == "google_calendar":
		from .google_calendar import GoogleCalendarAdapter
		return GoogleCalendarAdapter(token_provider, http_client=http_client, settings=settings)
	elif provider == "microsoft_outlook":
		from .microsoft_outlook import OutlookCalendarAdapter
		return OutlookCalendarAdapter(token_provider, http_client=http_client, settings=settings)
	else:
		raise ValueError(f"Unsupported provider: {provider}")
