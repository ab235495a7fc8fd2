"""
Interval Utilities

Half-open time intervals [start, end) and the overlap predicate shared by
every scheduling service, plus small helpers to place "HH:MM" wall-clock
times on a date in a given timezone.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Union

import pytz


HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class TimeInterval:
	"""Intervalo semiabierto [start, end). Invariante: start < end."""

	start: datetime
	end: datetime

	def __post_init__(self):
		if not self.start < self.end:
			raise ValueError(
				f"Interval start ({self.start.isoformat()}) must be before end ({self.end.isoformat()})"
			)

	@property
	def duration(self) -> timedelta:
		return self.end - self.start


def overlaps(a, b) -> bool:
	"""
	Verifica si dos intervalos semiabiertos se solapan.

	Condición de overlap: a.start < b.end AND a.end > b.start
	Intervalos adyacentes (a.end == b.start) NO se solapan.

	Args:
		a: cualquier objeto con atributos start/end
		b: cualquier objeto con atributos start/end

	Returns:
		bool: True si la intersección no es vacía
	"""
	return a.start < b.end and a.end > b.start


def get_timezone(tz_name: Union[str, pytz.BaseTzInfo, None]) -> pytz.BaseTzInfo:
	"""Resuelve un nombre IANA a un tzinfo de pytz (UTC si es None)."""
	if tz_name is None:
		return pytz.UTC
	if isinstance(tz_name, str):
		return pytz.timezone(tz_name)
	return tz_name


def ensure_aware(value: datetime, tz: Union[str, pytz.BaseTzInfo, None] = None) -> datetime:
	"""
	Garantiza un datetime con timezone.

	Un datetime naive se interpreta como hora local de `tz` (UTC por defecto).
	"""
	if value.tzinfo is not None:
		return value
	return get_timezone(tz).localize(value)


def parse_hhmm(value: Union[str, time, timedelta]) -> time:
	"""
	Convierte diferentes formatos de tiempo a datetime.time.

	Args:
		value: "HH:MM", time, o timedelta (desde medianoche)

	Returns:
		datetime.time object

	Raises:
		ValueError: si el string no tiene formato HH:MM
	"""
	if isinstance(value, time):
		return value
	elif isinstance(value, timedelta):
		# timedelta representa tiempo desde medianoche
		return (datetime.min + value).time()
	elif isinstance(value, str):
		match = HHMM_PATTERN.match(value.strip())
		if not match:
			raise ValueError(f"Invalid time '{value}'. Use HH:MM")
		return time(int(match.group(1)), int(match.group(2)))
	else:
		raise ValueError(f"Cannot convert {type(value)} to time")


def at_time_on_date(day: date, wall_time: time, tz: Union[str, pytz.BaseTzInfo, None]) -> datetime:
	"""Combina fecha + hora de pared y la localiza en el timezone dado."""
	tzinfo = get_timezone(tz)
	return tzinfo.localize(datetime.combine(day, wall_time))


def zone_of(value: datetime):
	"""
	Zona horaria completa de un datetime con timezone.

	Un datetime localizado con pytz lleva el tzinfo de un offset fijo
	(p. ej. EST); se recupera la zona IANA para poder localizar otras fechas.
	"""
	zone = getattr(value.tzinfo, "zone", None)
	if zone:
		return pytz.timezone(zone)
	return value.tzinfo


def localize(naive: datetime, tz) -> datetime:
	"""Asigna `tz` a una hora de pared naive (pytz o tzinfo estándar)."""
	if hasattr(tz, "localize"):
		return tz.localize(naive)
	return naive.replace(tzinfo=tz)


def js_weekday(day: date) -> int:
	"""Día de la semana con 0=Domingo .. 6=Sábado."""
	return day.isoweekday() % 7
