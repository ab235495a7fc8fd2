"""
Availability Service

Turns a user's weekly availability template into bookable slot start times,
considering:
- Availability Templates (weekly HH:MM windows per weekday)
- Busy intervals from every calendar source
- Timezones
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from team_scheduling.config import get_settings

from .busy import BusyIntervalAggregator
from .intervals import TimeInterval, at_time_on_date, ensure_aware, get_timezone, js_weekday, overlaps


logger = logging.getLogger(__name__)


class AvailabilityTemplateStore(ABC):
	"""Acceso a la plantilla semanal de disponibilidad de un usuario."""

	@abstractmethod
	async def get_template(self, user_id: str):
		"""
		Returns:
			AvailabilityTemplate, o None si el usuario no configuró disponibilidad
		"""
		pass


def get_day_window(template, day) -> Optional[TimeInterval]:
	"""
	Obtiene la ventana disponible [day_start, day_end) de un día.

	Args:
		template: AvailabilityTemplate
		day: fecha local

	Returns:
		TimeInterval, o None si el weekday falta, está deshabilitado o vacío
	"""
	entry = template.for_weekday(js_weekday(day))
	if entry is None:
		return None

	tz = get_timezone(template.timezone)
	day_start = at_time_on_date(day, entry.start_time, tz)
	day_end = at_time_on_date(day, entry.end_time, tz)

	if day_start >= day_end:
		return None

	return TimeInterval(day_start, day_end)


def compute_slots(
	template,
	busy: Iterable[TimeInterval],
	range_start: datetime,
	range_end: datetime,
	duration_minutes: int,
	stride_minutes: Optional[int] = None
) -> List[datetime]:
	"""
	Calcula los inicios de slot reservables para un rango.

	Args:
		template: AvailabilityTemplate del usuario
		busy: intervalos ocupados del usuario en el rango
		range_start: inicio del rango
		range_end: fin del rango (exclusivo)
		duration_minutes: duración de la reunión
		stride_minutes: paso entre inicios (por defecto el de settings, 30)

	Returns:
		list[datetime]: inicios de slot en orden cronológico

	Algoritmo (por cada día local d en [range_start, range_end)):
		1. Saltar el día si el weekday no está en la plantilla o está deshabilitado
		2. day_start / day_end = d a las horas HH:MM de la plantilla
		3. Avanzar slot_start desde day_start cada `stride_minutes`;
		   el slot se conserva mientras slot_end <= day_end (borde inclusivo)
		4. Descartar slots que se solapan con algún intervalo ocupado
		5. Descartar slots que empiezan fuera del rango pedido
	"""
	if duration_minutes <= 0:
		raise ValueError("duration_minutes must be positive")

	stride = timedelta(minutes=stride_minutes or get_settings().slot_stride_minutes)
	duration = timedelta(minutes=duration_minutes)
	tz = get_timezone(template.timezone)
	range_start = ensure_aware(range_start, tz)
	range_end = ensure_aware(range_end, tz)
	busy = list(busy)

	slots: List[datetime] = []
	current_day = range_start.astimezone(tz).date()

	while at_time_on_date(current_day, datetime.min.time(), tz) < range_end:
		window = get_day_window(template, current_day)
		if window is None:
			current_day += timedelta(days=1)
			continue

		slot_start = window.start
		while slot_start + duration <= window.end:
			candidate = TimeInterval(slot_start, slot_start + duration)

			in_range = range_start <= slot_start < range_end
			is_busy = any(overlaps(candidate, interval) for interval in busy)

			if in_range and not is_busy:
				slots.append(slot_start)

			slot_start = slot_start + stride

		current_day += timedelta(days=1)

	return slots


class AvailabilitySlotGenerator:
	"""
	Genera slots reservables para la página de booking de un usuario.

	Usage:
		generator = AvailabilitySlotGenerator(template_store, aggregator)
		slots = await generator.generate_slots(user_id, start, end, 30)
	"""

	def __init__(self, template_store: AvailabilityTemplateStore, aggregator: BusyIntervalAggregator):
		self.template_store = template_store
		self.aggregator = aggregator

	async def generate_slots(
		self,
		user_id: str,
		range_start: datetime,
		range_end: datetime,
		duration_minutes: int
	) -> List[datetime]:
		"""
		Obtiene los slots disponibles del usuario.

		Returns:
			list[datetime]: inicios de slot (vacía si no hay plantilla)
		"""
		template = await self.template_store.get_template(user_id)
		if template is None:
			logger.info(f"User {user_id} has no availability template, no slots offered")
			return []

		tz = get_timezone(template.timezone)
		range_start = ensure_aware(range_start, tz)
		range_end = ensure_aware(range_end, tz)

		busy = await self.aggregator.get_busy_intervals(user_id, range_start, range_end)

		return compute_slots(template, busy, range_start, range_end, duration_minutes)
