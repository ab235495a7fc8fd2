"""
Conflict Grouping Service

Partitions one user's events for a view window into standalone events and
conflict groups (2+ events chained by overlaps) for presentation.
"""

from typing import Iterable, List, Union

from .models import ConflictGroup, EventInstance


def group_overlaps(events: Iterable[EventInstance]) -> List[Union[EventInstance, ConflictGroup]]:
	"""
	Agrupa eventos solapados en clusters.

	Args:
		events: instancias de un usuario para un día / vista

	Returns:
		list: EventInstance (sin conflicto) o ConflictGroup (2+ eventos),
			en orden cronológico del inicio de cada cluster

	Algoritmo:
		1. Ordenar por start ascendente
		2. Barrer manteniendo el cluster actual y su envolvente [min_start, max_end)
		3. Si el evento se solapa con la envolvente: agregarlo y extender max_end
		4. Si no: cerrar el cluster actual y empezar uno nuevo con el evento
		5. Al final, cerrar el último cluster

	La agrupación es transitiva: A-B y B-C quedan juntos aunque A y C no se toquen.
	"""
	ordered = sorted(events, key=lambda event: event.start)
	result: List[Union[EventInstance, ConflictGroup]] = []

	cluster: List[EventInstance] = []
	cluster_start = None
	cluster_end = None

	for event in ordered:
		# Overlap con la envolvente: event.start < max_end AND event.end > min_start
		if cluster and event.start < cluster_end and event.end > cluster_start:
			cluster.append(event)
			if event.end > cluster_end:
				cluster_end = event.end
			continue

		if cluster:
			result.append(_close_cluster(cluster))

		cluster = [event]
		cluster_start = event.start
		cluster_end = event.end

	if cluster:
		result.append(_close_cluster(cluster))

	return result


def conflict_groups(events: Iterable[EventInstance]) -> List[ConflictGroup]:
	"""Solo los grupos en conflicto (para badges / resolutor de conflictos)."""
	return [item for item in group_overlaps(events) if isinstance(item, ConflictGroup)]


def _close_cluster(cluster: List[EventInstance]) -> Union[EventInstance, ConflictGroup]:
	if len(cluster) == 1:
		return cluster[0]
	return ConflictGroup(events=list(cluster))
