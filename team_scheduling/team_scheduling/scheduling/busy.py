"""
Busy-Interval Aggregation Service

Collects the time a user is unavailable from every configured source:
- Internal event store (recurring events expanded)
- External calendar providers (Google Calendar, Microsoft Outlook)
- Lunch schedule blocks

Sources are fetched concurrently and isolated from each other: a provider
that fails contributes no intervals instead of failing the aggregation.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from team_scheduling.team_scheduling.calendar_providers.base import CalendarProviderError

from .intervals import TimeInterval, at_time_on_date, ensure_aware, get_timezone, js_weekday, parse_hhmm
from .models import BusyInterval, BusySource, EventTemplate, LunchSchedule
from .recurrence import materialize


logger = logging.getLogger(__name__)


class EventStore(ABC):
	"""Acceso a los eventos internos de un usuario."""

	@abstractmethod
	async def find_events(
		self,
		owner_id: str,
		start: datetime,
		end: datetime,
		exclude_cancelled: bool = True
	) -> List[EventTemplate]:
		"""
		Eventos del usuario cuyo [start_time, end_time) intersecta [start, end).

		Los eventos recurrentes pueden devolverse aunque su primera
		ocurrencia sea anterior a `start`; el agregador los expande.
		"""
		pass


class LunchScheduleStore(ABC):
	"""Acceso a la configuración de almuerzo de un usuario."""

	@abstractmethod
	async def get_lunch_schedule(self, user_id: str) -> Optional[LunchSchedule]:
		pass


@dataclass(frozen=True)
class ProviderOutcome:
	"""Resultado de consultar una fuente: intervalos o el error que la dejó vacía."""

	source: BusySource
	intervals: List[BusyInterval] = field(default_factory=list)
	error: Optional[BaseException] = None

	@property
	def ok(self) -> bool:
		return self.error is None


def lunch_intervals(
	schedule: LunchSchedule,
	start: datetime,
	end: datetime
) -> List[TimeInterval]:
	"""
	Genera un bloque de almuerzo por día local dentro del rango.

	Args:
		schedule: configuración de almuerzo
		start: inicio del rango
		end: fin del rango

	Returns:
		list[TimeInterval]: bloques que intersectan [start, end)

	Algoritmo:
		1. Recorrer días locales desde el día de `start` hasta el de `end`
		2. Si hay override para el weekday: usarlo, o saltar si está deshabilitado
		3. Si no hay override, usar el horario por defecto
		4. Conservar solo los bloques que intersectan el rango
	"""
	if not schedule.enabled:
		return []

	tz = get_timezone(schedule.timezone)
	start = ensure_aware(start)
	end = ensure_aware(end)

	current_day = start.astimezone(tz).date()
	last_day = end.astimezone(tz).date()
	blocks: List[TimeInterval] = []

	while current_day <= last_day:
		override = schedule.days.get(js_weekday(current_day))

		if override is not None and not override.enabled:
			current_day += timedelta(days=1)
			continue

		start_of_block = parse_hhmm(override.start_of_day if override else schedule.default_start)
		end_of_block = parse_hhmm(override.end_of_day if override else schedule.default_end)

		block_start = at_time_on_date(current_day, start_of_block, tz)
		block_end = at_time_on_date(current_day, end_of_block, tz)

		if block_start < block_end and block_start < end and block_end > start:
			blocks.append(TimeInterval(block_start, block_end))

		current_day += timedelta(days=1)

	return blocks


def _intervals_from_payload(items: List[Mapping[str, Any]], source: BusySource) -> List[BusyInterval]:
	"""
	Convierte la respuesta de un proveedor ({start, end}) en BusyIntervals.

	Los elementos sin start/end o con start >= end se descartan con warning.
	"""
	result: List[BusyInterval] = []

	for item in items:
		item_start = item.get("start")
		item_end = item.get("end")

		if not isinstance(item_start, datetime) or not isinstance(item_end, datetime):
			logger.warning(f"Ignoring {source.value} busy item without start/end datetimes: {item!r}")
			continue

		try:
			interval = TimeInterval(ensure_aware(item_start), ensure_aware(item_end))
		except ValueError as e:
			logger.warning(f"Ignoring invalid {source.value} busy item: {e}")
			continue

		result.append(BusyInterval(interval=interval, source=source))

	return result


class BusyIntervalAggregator:
	"""
	Agrega intervalos ocupados de todas las fuentes de un usuario.

	Usage:
		aggregator = BusyIntervalAggregator(
			event_store=store,
			providers={BusySource.GOOGLE: get_adapter("google_calendar", token_provider=tokens)},
		)
		busy = await aggregator.get_busy_intervals(user_id, start, end)
	"""

	def __init__(
		self,
		event_store: EventStore,
		providers: Optional[Dict[BusySource, Any]] = None,
		lunch_store: Optional[LunchScheduleStore] = None
	):
		"""
		Args:
			event_store: store de eventos internos
			providers: {BusySource: CalendarProviderAdapter} por proveedor externo
			lunch_store: store opcional de horarios de almuerzo
		"""
		self.event_store = event_store
		self.providers = dict(providers or {})
		self.lunch_store = lunch_store

	async def get_busy_intervals(
		self,
		user_id: str,
		start: datetime,
		end: datetime
	) -> List[TimeInterval]:
		"""
		Obtiene todos los intervalos ocupados del usuario en [start, end).

		Returns:
			list[TimeInterval]: sin deduplicar ni mergear (puede estar vacía)
		"""
		outcomes = await self.collect_outcomes(user_id, start, end)

		intervals: List[TimeInterval] = []
		for outcome in outcomes:
			intervals.extend(busy.interval for busy in outcome.intervals)

		return intervals

	async def collect_outcomes(
		self,
		user_id: str,
		start: datetime,
		end: datetime
	) -> List[ProviderOutcome]:
		"""
		Consulta todas las fuentes en paralelo.

		Returns:
			list[ProviderOutcome]: uno por fuente (interna primero, luego proveedores)

		Raises:
			Exception: solo si falla el store interno; los proveedores externos
				nunca propagan errores
		"""
		start = ensure_aware(start)
		end = ensure_aware(end)

		tasks = [self._fetch_internal(user_id, start, end)]
		tasks.extend(
			self._fetch_provider(source, adapter, user_id, start, end)
			for source, adapter in self.providers.items()
		)

		outcomes = list(await asyncio.gather(*tasks))

		for outcome in outcomes:
			logger.debug(
				f"Busy source {outcome.source.value} for {user_id}: "
				f"{len(outcome.intervals)} intervals" + ("" if outcome.ok else f" (failed: {outcome.error})")
			)

		return outcomes

	async def _fetch_internal(self, user_id: str, start: datetime, end: datetime) -> ProviderOutcome:
		"""Eventos internos (con recurrencias expandidas) + bloques de almuerzo."""
		events, lunch = await asyncio.gather(
			self.event_store.find_events(user_id, start, end, exclude_cancelled=True),
			self._fetch_lunch(user_id, start, end)
		)

		intervals = [
			BusyInterval(interval=instance.as_interval(), source=BusySource.INTERNAL)
			for instance in materialize(events, start, end)
			if instance.start < end and instance.end > start
		]
		intervals.extend(BusyInterval(interval=block, source=BusySource.INTERNAL) for block in lunch)

		return ProviderOutcome(source=BusySource.INTERNAL, intervals=intervals)

	async def _fetch_lunch(self, user_id: str, start: datetime, end: datetime) -> List[TimeInterval]:
		if self.lunch_store is None:
			return []

		schedule = await self.lunch_store.get_lunch_schedule(user_id)
		if schedule is None:
			return []
		return lunch_intervals(schedule, start, end)

	async def _fetch_provider(
		self,
		source: BusySource,
		adapter: Any,
		user_id: str,
		start: datetime,
		end: datetime
	) -> ProviderOutcome:
		"""
		Consulta un proveedor externo aislando cualquier fallo.

		Credenciales ausentes/expiradas, errores de red o respuestas no-2xx
		se registran y se tratan como "sin intervalos".
		"""
		try:
			items = await adapter.fetch_busy_events(user_id, start, end)
		except CalendarProviderError as e:
			logger.warning(f"Failed to fetch {source.value} availability for {user_id}: {e}")
			return ProviderOutcome(source=source, error=e)
		except Exception as e:
			logger.error(f"Unexpected error fetching {source.value} availability for {user_id}", exc_info=True)
			return ProviderOutcome(source=source, error=e)

		return ProviderOutcome(source=source, intervals=_intervals_from_payload(items or [], source))
