"""
Recurrence Expansion Service

Expands recurring event templates into concrete occurrences for a query
window, considering:
- Legacy recurrence kinds (DAILY, WEEKLY, BIWEEKLY, MONTHLY)
- RFC 5545 rule strings (FREQ, INTERVAL, BYDAY, UNTIL)
- The owning event's start as the only anchor (DTSTART)
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

import pytz
from dateutil.rrule import rrulestr

from .intervals import ensure_aware, localize, zone_of
from .models import (
	EventInstance,
	EventTemplate,
	RecurrenceRuleError,
	parse_recurrence,
)


logger = logging.getLogger(__name__)

MAX_OCCURRENCES = 1000
INSTANCE_ID_SEPARATOR = "_"
UNTIL_PATTERN = re.compile(r"UNTIL=(\d{8})(?:T(\d{6}))?(Z?)", re.IGNORECASE)


def make_instance_id(source_event_id: str, occurrence_start: datetime) -> str:
	"""Id sintético: <id del evento>_<epoch en milisegundos>."""
	epoch_ms = int(occurrence_start.timestamp() * 1000)
	return f"{source_event_id}{INSTANCE_ID_SEPARATOR}{epoch_ms}"


def source_id_from_instance_id(instance_id: str) -> str:
	"""
	Recupera el id del evento origen quitando el sufijo de ocurrencia.

	Los ids que no tienen sufijo numérico se devuelven tal cual.
	"""
	head, sep, tail = instance_id.rpartition(INSTANCE_ID_SEPARATOR)
	if sep and head and tail.lstrip("-").isdigit():
		return head
	return instance_id


def _rule_string_for(event: EventTemplate) -> Optional[str]:
	"""
	Normaliza la recurrencia del evento a un string de regla.

	Returns:
		str con la regla, o None si el evento no es recurrente

	Raises:
		RecurrenceRuleError: si la recurrencia no es reconocida
	"""
	recurrence = parse_recurrence(event.recurrence)
	if recurrence is None:
		return None

	rule = recurrence.to_rule_string()
	if not rule:
		raise RecurrenceRuleError(f"Empty recurrence rule for event {event.id}")
	return rule


def _until_in_wall_time(rule_string: str, tz) -> str:
	"""
	Reescribe UNTIL como hora de pared naive en `tz`.

	La expansión se hace sobre horas naive, así que:
	- UNTIL en UTC (sufijo Z) -> convertido a hora local
	- UNTIL solo fecha -> fin de ese día local (la fecha es inclusiva)
	- UNTIL con hora sin Z -> se deja igual (hora flotante)
	"""
	def replace(match):
		day, clock, zulu = match.group(1), match.group(2), match.group(3)
		if zulu:
			until = pytz.UTC.localize(datetime.strptime(day + (clock or "000000"), "%Y%m%d%H%M%S"))
			local_until = until.astimezone(tz).replace(tzinfo=None)
		elif clock:
			return match.group(0)
		else:
			local_until = datetime.strptime(day, "%Y%m%d").replace(hour=23, minute=59, second=59)
		return "UNTIL=" + local_until.strftime("%Y%m%dT%H%M%S")

	return UNTIL_PATTERN.sub(replace, rule_string)


def expand(
	events: Iterable[EventTemplate],
	window_start: datetime,
	window_end: datetime
) -> List[EventInstance]:
	"""
	Expande eventos recurrentes en instancias concretas.

	Args:
		events: plantillas de evento (las no recurrentes se ignoran)
		window_start: inicio de la ventana (inclusive)
		window_end: fin de la ventana (inclusive)

	Returns:
		list[EventInstance]: instancias con synthetic=True

	Algoritmo:
		1. Ignorar eventos sin recurrencia (None / NONE)
		2. Normalizar legacy -> regla; los valores no reconocidos se saltan
		3. Construir la regla sobre la hora de pared del start original,
		   en la zona del evento
		4. Enumerar ocurrencias naive y localizarlas una por una (DST)
		5. Conservar las que caen en [window_start, window_end]
		6. Cada ocurrencia dura end_time - start_time del template
	"""
	window_start = ensure_aware(window_start)
	window_end = ensure_aware(window_end)
	instances: List[EventInstance] = []

	for event in events:
		try:
			rule_string = _rule_string_for(event)
			if rule_string is None:
				continue

			anchor = ensure_aware(event.start_time)
			duration = ensure_aware(event.end_time) - anchor
			if duration <= timedelta(0):
				raise ValueError("end_time must be after start_time")

			tz = zone_of(anchor)
			local_anchor = anchor.astimezone(tz).replace(tzinfo=None)
			rule = rrulestr(_until_in_wall_time(rule_string, tz), dtstart=local_anchor)

			# Margen de un día para los bordes ambiguos por DST
			local_occurrences = rule.between(
				window_start.astimezone(tz).replace(tzinfo=None) - timedelta(days=1),
				window_end.astimezone(tz).replace(tzinfo=None) + timedelta(days=1),
				inc=True
			)
		except (RecurrenceRuleError, ValueError, TypeError) as e:
			# Una regla mal formada descarta el evento completo
			logger.warning(f"Skipping recurrence for event {event.id}: {e}")
			continue

		occurrences = [
			occurrence for occurrence in (localize(local, tz) for local in local_occurrences)
			if window_start <= occurrence <= window_end
		]

		if len(occurrences) > MAX_OCCURRENCES:
			logger.warning(
				f"Event {event.id} produced {len(occurrences)} occurrences, "
				f"truncating to {MAX_OCCURRENCES}"
			)
			occurrences = occurrences[:MAX_OCCURRENCES]

		for occurrence in occurrences:
			end = occurrence + duration
			if hasattr(tz, "normalize"):
				end = tz.normalize(end)

			instances.append(EventInstance(
				id=make_instance_id(event.id, occurrence),
				source_event_id=event.id,
				start=occurrence,
				end=end,
				title=event.title,
				synthetic=True
			))

	return instances


def materialize(
	events: Iterable[EventTemplate],
	window_start: datetime,
	window_end: datetime
) -> List[EventInstance]:
	"""
	Lista completa de instancias para una vista de calendario.

	Combina:
	- eventos simples que intersectan [window_start, window_end) (synthetic=False)
	- todas las expansiones de los eventos recurrentes

	Returns:
		list[EventInstance]: ordenada por start
	"""
	window_start = ensure_aware(window_start)
	window_end = ensure_aware(window_end)
	events = list(events)
	static_instances: List[EventInstance] = []
	recurring: List[EventTemplate] = []

	for event in events:
		try:
			is_recurring = parse_recurrence(event.recurrence) is not None
		except RecurrenceRuleError as e:
			logger.warning(f"Skipping event {event.id} with unrecognized recurrence: {e}")
			continue

		if is_recurring:
			recurring.append(event)
			continue

		start = ensure_aware(event.start_time)
		end = ensure_aware(event.end_time)
		if start >= end:
			logger.warning(f"Skipping event {event.id}: end_time must be after start_time")
			continue

		if start < window_end and end > window_start:
			static_instances.append(EventInstance(
				id=event.id,
				source_event_id=event.id,
				start=start,
				end=end,
				title=event.title,
				synthetic=False
			))

	result = static_instances + expand(recurring, window_start, window_end)
	result.sort(key=lambda x: x.start)
	return result
