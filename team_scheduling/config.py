"""
Scheduling Settings

Runtime configuration for the scheduling core. Values come from
TEAM_SCHEDULING_* environment variables (a local .env file is honoured),
falling back to the defaults below.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


ENV_PREFIX = "TEAM_SCHEDULING_"


@dataclass(frozen=True)
class SchedulingSettings:
	default_timezone: str = "UTC"
	slot_stride_minutes: int = 30
	provider_timeout_seconds: float = 10.0
	google_api_base_url: str = "https://www.googleapis.com/calendar/v3"
	microsoft_graph_base_url: str = "https://graph.microsoft.com/v1.0"
	outlook_page_size: int = 100


def _env(name: str, default):
	"""Lee TEAM_SCHEDULING_<name> convirtiendo al tipo del default."""
	raw = os.getenv(ENV_PREFIX + name)
	if raw is None or raw == "":
		return default
	return type(default)(raw)


@lru_cache(maxsize=1)
def get_settings() -> SchedulingSettings:
	"""
	Construye la configuración a partir del entorno.

	Returns:
		SchedulingSettings (cacheado; usar get_settings.cache_clear() en tests)
	"""
	load_dotenv()
	defaults = SchedulingSettings()

	return SchedulingSettings(
		default_timezone=_env("DEFAULT_TIMEZONE", defaults.default_timezone),
		slot_stride_minutes=_env("SLOT_STRIDE_MINUTES", defaults.slot_stride_minutes),
		provider_timeout_seconds=_env("PROVIDER_TIMEOUT_SECONDS", defaults.provider_timeout_seconds),
		google_api_base_url=_env("GOOGLE_API_BASE_URL", defaults.google_api_base_url),
		microsoft_graph_base_url=_env("MICROSOFT_GRAPH_BASE_URL", defaults.microsoft_graph_base_url),
		outlook_page_size=_env("OUTLOOK_PAGE_SIZE", defaults.outlook_page_size),
	)
