"""
Scheduling Data Model

Record types shared by the scheduling services:
- Busy time (BusySource, BusyInterval)
- Weekly availability and lunch templates
- Recurrence rules (legacy kinds or RFC 5545 rule strings)
- Event templates, concrete instances, suggested slots and conflict groups

Everything derived here is query-scoped and immutable.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .intervals import TimeInterval, parse_hhmm
from .validators import (
	InvalidTemplateError,
	validate_day_window,
	validate_hhmm,
	validate_timezone,
	validate_weekday,
)


class BusySource(Enum):
	INTERNAL = "internal"
	GOOGLE = "google"
	OUTLOOK = "outlook"


@dataclass(frozen=True)
class BusyInterval:
	"""Intervalo ocupado con su procedencia (solo para diagnóstico)."""

	interval: TimeInterval
	source: BusySource


# ===== AVAILABILITY TEMPLATES =====

@dataclass(frozen=True)
class DayAvailability:
	start_of_day: str
	end_of_day: str
	enabled: bool = True

	@property
	def start_time(self):
		return parse_hhmm(self.start_of_day)

	@property
	def end_time(self):
		return parse_hhmm(self.end_of_day)


def _parse_day_entries(entries: Mapping[Any, Mapping[str, Any]]) -> Dict[int, DayAvailability]:
	"""
	Convierte un mapping crudo {weekday: {start, end, enabled}} a DayAvailability.

	Valida:
	- weekday entre 0 y 6, sin duplicados
	- start/end con formato HH:MM
	- start < end si el día está habilitado
	"""
	days: Dict[int, DayAvailability] = {}

	for raw_weekday, entry in entries.items():
		weekday = validate_weekday(raw_weekday)
		if weekday in days:
			raise InvalidTemplateError(f"Duplicate entry for weekday {weekday}")

		start_raw = entry.get("start_of_day", entry.get("start"))
		end_raw = entry.get("end_of_day", entry.get("end"))
		enabled = bool(entry.get("enabled", True))

		start = validate_hhmm(start_raw, "start_of_day")
		end = validate_hhmm(end_raw, "end_of_day")
		if enabled:
			validate_day_window(start, end, f"Weekday {weekday}")

		days[weekday] = DayAvailability(
			start_of_day=start.strftime("%H:%M"),
			end_of_day=end.strftime("%H:%M"),
			enabled=enabled,
		)

	return days


@dataclass(frozen=True)
class AvailabilityTemplate:
	"""
	Plantilla semanal: weekday (0=Domingo..6=Sábado) -> DayAvailability.

	Las horas HH:MM se interpretan en `timezone`.
	"""

	days: Dict[int, DayAvailability] = field(default_factory=dict)
	timezone: str = "UTC"

	def for_weekday(self, weekday: int) -> Optional[DayAvailability]:
		"""Entrada habilitada para el weekday, o None."""
		entry = self.days.get(weekday)
		if entry is None or not entry.enabled:
			return None
		return entry

	@classmethod
	def from_mapping(
		cls,
		entries: Mapping[Any, Mapping[str, Any]],
		timezone: str = "UTC"
	) -> "AvailabilityTemplate":
		"""
		Construye y valida una plantilla desde datos de configuración.

		Raises:
			InvalidTemplateError: si algún día o el timezone es inválido
		"""
		return cls(days=_parse_day_entries(entries), timezone=validate_timezone(timezone))


@dataclass(frozen=True)
class LunchSchedule:
	"""Bloque de almuerzo diario con overrides opcionales por weekday."""

	enabled: bool = True
	default_start: str = "12:00"
	default_end: str = "13:00"
	days: Dict[int, DayAvailability] = field(default_factory=dict)
	timezone: str = "UTC"

	@classmethod
	def from_mapping(
		cls,
		default_start: str,
		default_end: str,
		entries: Optional[Mapping[Any, Mapping[str, Any]]] = None,
		timezone: str = "UTC",
		enabled: bool = True
	) -> "LunchSchedule":
		start = validate_hhmm(default_start, "lunch start")
		end = validate_hhmm(default_end, "lunch end")
		validate_day_window(start, end, "Lunch")

		return cls(
			enabled=enabled,
			default_start=start.strftime("%H:%M"),
			default_end=end.strftime("%H:%M"),
			days=_parse_day_entries(entries or {}),
			timezone=validate_timezone(timezone),
		)


# ===== RECURRENCE =====

class RecurrenceKind(Enum):
	NONE = "NONE"
	DAILY = "DAILY"
	WEEKLY = "WEEKLY"
	BIWEEKLY = "BIWEEKLY"
	MONTHLY = "MONTHLY"


LEGACY_RULES: Dict[RecurrenceKind, str] = {
	RecurrenceKind.DAILY: "FREQ=DAILY",
	RecurrenceKind.WEEKLY: "FREQ=WEEKLY",
	RecurrenceKind.BIWEEKLY: "FREQ=WEEKLY;INTERVAL=2",
	RecurrenceKind.MONTHLY: "FREQ=MONTHLY",
}


class RecurrenceRuleError(ValueError):
	"""Regla de recurrencia no reconocida o mal formada."""
	pass


@dataclass(frozen=True)
class LegacyRecurrence:
	kind: RecurrenceKind

	def to_rule_string(self) -> Optional[str]:
		return LEGACY_RULES.get(self.kind)


@dataclass(frozen=True)
class RuleRecurrence:
	rule: str

	def to_rule_string(self) -> Optional[str]:
		# El ancla (DTSTART) la pone siempre el expander
		lines = [
			line.strip() for line in self.rule.splitlines()
			if line.strip() and not line.strip().upper().startswith("DTSTART")
		]
		return "\n".join(lines) or None


RecurrenceRule = Union[LegacyRecurrence, RuleRecurrence]


def parse_recurrence(value: Union[str, RecurrenceRule, RecurrenceKind, None]) -> Optional[RecurrenceRule]:
	"""
	Resuelve el valor crudo de recurrencia a la variante canónica.

	Args:
		value: None, "NONE", nombre legacy ("WEEKLY"...), regla ("FREQ=..." o "RRULE:...")
			o una variante ya construida

	Returns:
		LegacyRecurrence / RuleRecurrence, o None si no hay recurrencia

	Raises:
		RecurrenceRuleError: si el string no es legacy ni regla
	"""
	if value is None:
		return None
	if isinstance(value, (LegacyRecurrence, RuleRecurrence)):
		if isinstance(value, LegacyRecurrence) and value.kind == RecurrenceKind.NONE:
			return None
		return value
	if isinstance(value, RecurrenceKind):
		return None if value == RecurrenceKind.NONE else LegacyRecurrence(value)

	text = str(value).strip()
	if not text or text.upper() == RecurrenceKind.NONE.value:
		return None

	upper = text.upper()
	if upper.startswith("FREQ") or upper.startswith("RRULE") or upper.startswith("DTSTART"):
		return RuleRecurrence(text)

	try:
		return LegacyRecurrence(RecurrenceKind(upper))
	except ValueError:
		raise RecurrenceRuleError(f"Unrecognized recurrence '{text}'")


# ===== EVENTS =====

@dataclass(frozen=True)
class EventTemplate:
	"""Definición de un evento (simple o recurrente) de un usuario."""

	id: str
	title: str
	start_time: datetime
	end_time: datetime
	recurrence: Union[str, RecurrenceRule, None] = None

	@property
	def duration(self):
		return self.end_time - self.start_time


@dataclass(frozen=True)
class EventInstance:
	"""Ocurrencia concreta. synthetic=True si viene de expandir una recurrencia."""

	id: str
	source_event_id: str
	start: datetime
	end: datetime
	title: str = ""
	synthetic: bool = False

	def as_interval(self) -> TimeInterval:
		return TimeInterval(self.start, self.end)


@dataclass(frozen=True)
class TimeSlot:
	start: datetime
	end: datetime
	score: float


@dataclass(frozen=True)
class ConflictGroup:
	"""Cluster de 2+ eventos conectados por solapamientos."""

	events: List[EventInstance]

	@property
	def start(self) -> datetime:
		return min(event.start for event in self.events)

	@property
	def end(self) -> datetime:
		return max(event.end for event in self.events)


@dataclass(frozen=True)
class UserCalendar:
	"""Eventos (ya expandidos) de un usuario para el buscador de horarios."""

	user_id: str
	events: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class WorkingHours:
	user_id: str
	timezone: str
	start_hour: float = 9
	end_hour: float = 17
