"""
Scheduling Validators

Boundary validation for availability data coming from user settings:
weekdays, "HH:MM" strings, day windows and timezone names.
"""

from datetime import time
from typing import Any

import pytz

from .intervals import parse_hhmm


class InvalidTemplateError(ValueError):
	"""Plantilla de disponibilidad mal formada."""
	pass


def validate_weekday(value: Any) -> int:
	"""
	Valida un día de semana (0=Domingo .. 6=Sábado).

	Args:
		value: int o string numérico

	Returns:
		int: weekday validado

	Raises:
		InvalidTemplateError: si no es un entero entre 0 y 6
	"""
	try:
		weekday = int(value)
	except (TypeError, ValueError):
		raise InvalidTemplateError(f"Invalid weekday '{value}'. Use 0 (Sunday) to 6 (Saturday)")

	if weekday < 0 or weekday > 6:
		raise InvalidTemplateError(f"Invalid weekday '{value}'. Use 0 (Sunday) to 6 (Saturday)")

	return weekday


def validate_hhmm(value: Any, field_name: str = "time") -> time:
	"""
	Valida un string HH:MM y lo convierte a time.

	Raises:
		InvalidTemplateError: si falta o el formato es inválido
	"""
	if value is None or value == "":
		raise InvalidTemplateError(f"{field_name} is required")

	try:
		return parse_hhmm(value)
	except ValueError:
		raise InvalidTemplateError(f"Invalid {field_name} format '{value}'. Use HH:MM")


def validate_day_window(start: time, end: time, label: str = "Window") -> None:
	"""
	Valida que start < end para un día habilitado.

	Raises:
		InvalidTemplateError: si la ventana está vacía o invertida
	"""
	if start >= end:
		raise InvalidTemplateError(
			f"{label}: start ({start.strftime('%H:%M')}) must be before end ({end.strftime('%H:%M')})"
		)


def validate_timezone(tz_name: Any) -> str:
	"""Valida un nombre de timezone IANA."""
	if not tz_name:
		raise InvalidTemplateError("timezone is required")

	try:
		pytz.timezone(str(tz_name))
	except pytz.UnknownTimeZoneError:
		raise InvalidTemplateError(f"Unknown timezone '{tz_name}'")

	return str(tz_name)
