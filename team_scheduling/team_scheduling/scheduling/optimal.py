"""
Optimal Slot Finder

Finds and ranks meeting times where every participant is free:
- 15-minute grid inside business hours (08:00 - 18:00 local)
- Per-duration filtering (15, 30, 60 minutes), computed independently
- Heuristic scoring (time of day, weekday, recency, clean start minutes)
- Diversified top-3 selection per duration
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import pytz

from team_scheduling.config import get_settings

from .intervals import ensure_aware, get_timezone, js_weekday
from .models import TimeSlot, UserCalendar


logger = logging.getLogger(__name__)

WORK_START_HOUR = 8
WORK_END_HOUR = 18
PRIME_START_HOUR = 10
PRIME_END_HOUR = 16
LATE_CUTOFF_HOUR = 17

GRID_MINUTES = 15
MAX_SEARCH_DAYS = 8
SUGGESTION_DURATIONS = (15, 30, 60)
TOP_N = 3


def _normalize_window(search_start: datetime, days_to_search: int, tz) -> tuple:
	"""
	Calcula la ventana de búsqueda en hora local (naive).

	- Si search_start es >= 17:00 local, empezar mañana a las 00:00
	- La ventana termina al final del día start + days_to_search
	- Nunca más de MAX_SEARCH_DAYS días desde el inicio
	"""
	local_start = ensure_aware(search_start, tz).astimezone(tz).replace(tzinfo=None)

	if local_start.hour >= LATE_CUTOFF_HOUR:
		local_start = datetime.combine(local_start.date() + timedelta(days=1), datetime.min.time())

	end_window = datetime.combine(
		local_start.date() + timedelta(days=days_to_search),
		datetime.max.time()
	)
	max_end = local_start + timedelta(days=MAX_SEARCH_DAYS)

	return local_start, min(end_window, max_end)


def generate_raw_slots(start: datetime, end: datetime) -> List[datetime]:
	"""
	Genera inicios cada 15 minutos dentro de horario laboral.

	Args:
		start: inicio local (naive)
		end: fin local (naive, exclusivo)

	Returns:
		list[datetime]: instantes locales naive alineados a 15 minutos

	Algoritmo:
		1. Alinear start al siguiente múltiplo de 15 minutos (segundos a 0)
		2. Antes de las 08:00 -> saltar a las 08:00 del mismo día
		3. Desde las 18:00 -> saltar a las 08:00 del día siguiente
		4. Dentro de [08:00, 18:00) -> agregar y avanzar 15 minutos
	"""
	current = start.replace(second=0, microsecond=0)
	if start.second or start.microsecond:
		current += timedelta(minutes=1)

	remainder = current.minute % GRID_MINUTES
	if remainder:
		current += timedelta(minutes=GRID_MINUTES - remainder)

	slots: List[datetime] = []

	while current < end:
		if current.hour < WORK_START_HOUR:
			current = current.replace(hour=WORK_START_HOUR, minute=0)
			continue
		if current.hour >= WORK_END_HOUR:
			next_day = current.date() + timedelta(days=1)
			current = datetime.combine(next_day, datetime.min.time()).replace(hour=WORK_START_HOUR)
			continue

		slots.append(current)
		current += timedelta(minutes=GRID_MINUTES)

	return slots


def _ends_after_business_hours(end: datetime) -> bool:
	"""True si el fin local pasa de las 18:00 (18:00 exacto es válido)."""
	return end.hour > WORK_END_HOUR or (end.hour == WORK_END_HOUR and end.minute > 0)


def is_slot_available(start: datetime, end: datetime, calendars: Sequence[UserCalendar], tz=None) -> bool:
	"""
	Verifica que ningún usuario tenga un evento que se solape con [start, end).

	Los eventos pueden exponer start/end o start_time/end_time; los datetimes
	naive se leen como hora local de `tz`.
	"""
	for calendar in calendars:
		for event in calendar.events:
			event_start = ensure_aware(getattr(event, "start", None) or getattr(event, "start_time"), tz)
			event_end = ensure_aware(getattr(event, "end", None) or getattr(event, "end_time"), tz)

			# Overlap: start < event_end AND end > event_start
			if start < event_end and end > event_start:
				return False

	return True


def score_time_slot(start: datetime, now: datetime) -> int:
	"""
	Puntúa un slot con heurísticas de preferencia (base 100).

	Args:
		start: inicio del slot en hora local
		now: instante de referencia en la misma zona

	Returns:
		int: score (mayor es mejor)
	"""
	score = 100
	hour = start.hour
	minute = start.minute
	day = js_weekday(start.date())

	# Franja horaria
	if PRIME_START_HOUR <= hour < PRIME_END_HOUR:
		score += 50
	elif WORK_START_HOUR + 1 <= hour < WORK_END_HOUR - 1:
		score += 20
	else:
		score -= 30

	# Sweet spots
	if hour in (10, 11):
		score += 20
	if hour in (14, 15):
		score += 15

	# Bajón post-almuerzo
	if hour == 13:
		score -= 10

	# Lunes/Martes mejor, viernes peor
	if day in (1, 2):
		score += 10
	if day == 5:
		score -= 5

	# Mientras antes mejor
	diff_days = (start - now) // timedelta(days=1)

	if start.date() == now.date():
		score += 15
	elif diff_days == 1:
		score += 10
	elif diff_days <= 3:
		score += 5
	else:
		score -= diff_days * 2

	# Horas "limpias"
	if minute == 0:
		score += 10
	elif minute == 30:
		score += 5

	return score


def process_slots_for_duration(
	local_starts: Iterable[datetime],
	duration_minutes: int,
	calendars: Sequence[UserCalendar],
	tz,
	local_now: datetime
) -> List[TimeSlot]:
	"""
	Filtra y puntúa los inicios para una duración.

	Returns:
		list[TimeSlot]: slots válidos ordenados por score descendente (estable)
	"""
	valid: List[TimeSlot] = []
	duration = timedelta(minutes=duration_minutes)

	for local_start in local_starts:
		local_end = local_start + duration

		# 1. Debe terminar antes de las 18:00
		if _ends_after_business_hours(local_end):
			continue

		start = tz.localize(local_start)
		end = tz.localize(local_end)

		# 2. Todos deben estar libres
		if not is_slot_available(start, end, calendars, tz):
			continue

		valid.append(TimeSlot(start=start, end=end, score=score_time_slot(local_start, local_now)))

	valid.sort(key=lambda slot: slot.score, reverse=True)
	return valid


def select_top_with_diversity(sorted_slots: List[TimeSlot], tz, limit: int = TOP_N) -> List[TimeSlot]:
	"""
	Elige los mejores slots evitando repetir (weekday, hora).

	Algoritmo:
		1. Recorrer en orden de score; aceptar si no hay selección aún o si
		   su clave (weekday, hora) no fue usada
		2. Si quedaron menos de `limit`, completar con los siguientes mejores
		   sin importar la clave, preservando el orden de score
	"""
	selected: List[TimeSlot] = []
	used_keys = set()

	for slot in sorted_slots:
		if len(selected) >= limit:
			break

		local_start = slot.start.astimezone(tz)
		key = (js_weekday(local_start.date()), local_start.hour)

		if selected and key in used_keys:
			continue

		selected.append(slot)
		used_keys.add(key)

	if len(selected) < limit and len(sorted_slots) > len(selected):
		chosen = {id(slot) for slot in selected}
		for slot in sorted_slots:
			if len(selected) >= limit:
				break
			if id(slot) not in chosen:
				selected.append(slot)
				chosen.add(id(slot))

	return selected


def find_best_slots(
	calendars: Sequence[UserCalendar],
	search_start: Optional[datetime] = None,
	days_to_search: int = 7,
	now: Optional[datetime] = None,
	timezone: Optional[str] = None
) -> Dict[int, List[TimeSlot]]:
	"""
	Busca los mejores horarios comunes para varios usuarios.

	Args:
		calendars: eventos (ya expandidos) de cada usuario
		search_start: desde cuándo buscar (por defecto ahora)
		days_to_search: días a cubrir (máximo interno de 8)
		now: instante de referencia para el score de cercanía
		timezone: zona horaria local para horario laboral (por defecto la de settings)

	Returns:
		dict: {15: [TimeSlot], 30: [TimeSlot], 60: [TimeSlot]} con <= 3 slots cada uno
	"""
	timezone = timezone or get_settings().default_timezone
	tz = get_timezone(timezone)
	now = ensure_aware(now or datetime.now(pytz.UTC), tz)
	search_start = ensure_aware(search_start or now, tz)
	local_now = now.astimezone(tz).replace(tzinfo=None)

	window_start, window_end = _normalize_window(search_start, days_to_search, tz)
	raw_slots = generate_raw_slots(window_start, window_end)

	result: Dict[int, List[TimeSlot]] = {}
	for duration_minutes in SUGGESTION_DURATIONS:
		ranked = process_slots_for_duration(raw_slots, duration_minutes, calendars, tz, local_now)
		result[duration_minutes] = select_top_with_diversity(ranked, tz)

	logger.debug(
		f"find_best_slots: {len(raw_slots)} candidates for {len(calendars)} calendars, "
		+ ", ".join(f"{d}min={len(s)}" for d, s in result.items())
	)

	return result


async def suggest_meeting_times(
	user_ids: Sequence[str],
	aggregator,
	search_start: Optional[datetime] = None,
	days_to_search: int = 7,
	now: Optional[datetime] = None,
	timezone: Optional[str] = None
) -> Dict[int, List[TimeSlot]]:
	"""
	Obtiene en paralelo los intervalos ocupados de cada usuario y busca horarios.

	Args:
		user_ids: participantes
		aggregator: BusyIntervalAggregator

	Returns:
		dict: igual que find_best_slots
	"""
	timezone = timezone or get_settings().default_timezone
	tz = get_timezone(timezone)
	now = ensure_aware(now or datetime.now(pytz.UTC), tz)
	search_start = ensure_aware(search_start or now, tz)

	# Cubrir la ventana completa de búsqueda (incluye el corrimiento de las 17:00)
	fetch_start = search_start
	fetch_end = search_start + timedelta(days=MAX_SEARCH_DAYS + 1)

	busy_lists = await asyncio.gather(*(
		aggregator.get_busy_intervals(user_id, fetch_start, fetch_end)
		for user_id in user_ids
	))

	calendars = [
		UserCalendar(user_id=user_id, events=list(busy))
		for user_id, busy in zip(user_ids, busy_lists)
	]

	return find_best_slots(calendars, search_start, days_to_search, now=now, timezone=timezone)
