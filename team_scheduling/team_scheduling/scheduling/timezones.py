"""
Golden Hours

Finds the UTC ranges of a day where every participant is inside their own
local working hours.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Sequence

import pytz

from .intervals import TimeInterval, get_timezone
from .models import WorkingHours


SLOT_MINUTES = 15


def find_golden_hours(users: Sequence[WorkingHours], day: date) -> List[TimeInterval]:
	"""
	Busca rangos del día (UTC) dentro del horario laboral de todos.

	Args:
		users: horario laboral y timezone de cada participante
		day: fecha UTC a analizar

	Returns:
		list[TimeInterval]: rangos UTC, con slots contiguos unidos

	Algoritmo:
		1. Recorrer los 96 slots de 15 minutos del día en UTC
		2. Para cada usuario, convertir el slot a su hora local
		3. El slot vale si para todos start_hour <= hora local < end_hour
		4. Unir slots válidos contiguos
	"""
	if not users:
		return []

	day_start = pytz.UTC.localize(datetime.combine(day, time.min))
	zones = [(user, get_timezone(user.timezone)) for user in users]
	ranges: List[TimeInterval] = []

	for i in range(24 * 60 // SLOT_MINUTES):
		slot_start = day_start + timedelta(minutes=i * SLOT_MINUTES)
		slot_end = slot_start + timedelta(minutes=SLOT_MINUTES)

		all_available = True
		for user, tz in zones:
			local = slot_start.astimezone(tz)
			time_float = local.hour + local.minute / 60

			if time_float < user.start_hour or time_float >= user.end_hour:
				all_available = False
				break

		if not all_available:
			continue

		# Unir con el anterior si es contiguo
		if ranges and ranges[-1].end == slot_start:
			ranges[-1] = TimeInterval(ranges[-1].start, slot_end)
		else:
			ranges.append(TimeInterval(slot_start, slot_end))

	return ranges
