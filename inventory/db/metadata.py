"""Read-only metadata queries over the inventory tables.

:class:`MetadataQueryService` answers "which services / instances /
endpoints / databases exist" questions.  Every operation builds its own
predicate, acquires one connection from the :class:`QueryExecutor`, runs a
single statement, maps all rows and releases the connection before
returning.

Failures
--------
* Executor failures surface as :class:`~inventory.db.executor.StorageError`
  and abort the whole operation.
* A malformed ``properties`` blob only affects its own row: it is logged and
  the row falls back to defaults.
* :meth:`MetadataQueryService.search_service` returns ``None`` when nothing
  matches.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from inventory.config import QueryConfig
from inventory.db.executor import QueryExecutor, Row
from inventory.db.models import (
    UNKNOWN_DATABASE_TYPE,
    ClusterBrief,
    Database,
    DetectPoint,
    Endpoint,
    Language,
    NodeType,
    Service,
    ServiceInstance,
)
from inventory.db.predicates import (
    DETECT_POINT,
    ENDPOINT_TRAFFIC,
    HEARTBEAT_TIME,
    INSTANCE_UUID,
    IS_ADDRESS,
    NAME,
    NODE_TYPE,
    PROPERTIES,
    REGISTER_TIME,
    SEQUENCE,
    SERVICE_ID,
    SERVICE_INSTANCE_INVENTORY,
    SERVICE_INVENTORY,
    Predicate,
    and_,
    contains,
    count,
    eq,
    select,
    time_range_overlap,
)
from inventory.db.properties import (
    PropertyDecodeError,
    database_type,
    decode_instance_properties,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Endpoint search over-fetches by this factor and leaves de-duplication to
# the caller (see distinct_endpoints) instead of a storage-side DISTINCT.
ENDPOINT_FETCH_MULTIPLIER = 7

_FALSE = 0


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------

def _row_to_service(row: Row) -> Service:
    return Service(
        id=int(row[SEQUENCE]),
        name=row[NAME],
        node_type=NodeType(row[NODE_TYPE]),
        is_address=bool(row[IS_ADDRESS]),
        register_time=int(row[REGISTER_TIME]),
        heartbeat_time=int(row[HEARTBEAT_TIME]),
        properties=row[PROPERTIES],
    )


def _row_to_database(row: Row) -> Database:
    try:
        db_type = database_type(row[PROPERTIES])
    except PropertyDecodeError as exc:
        logger.warning("Database %s has unreadable properties: %s", row[SEQUENCE], exc)
        db_type = UNKNOWN_DATABASE_TYPE
    return Database(id=int(row[SEQUENCE]), name=row[NAME], type=db_type)


def _row_to_instance(row: Row) -> ServiceInstance:
    try:
        language, attributes = decode_instance_properties(row[PROPERTIES])
    except PropertyDecodeError as exc:
        logger.warning("Instance %s has unreadable properties: %s", row[SEQUENCE], exc)
        language, attributes = Language.UNKNOWN, ()
    return ServiceInstance(
        id=str(row[SEQUENCE]),
        service_id=int(row[SERVICE_ID]),
        name=row[NAME],
        instance_uuid=row[INSTANCE_UUID],
        language=language,
        attributes=attributes,
        register_time=int(row[REGISTER_TIME]),
        heartbeat_time=int(row[HEARTBEAT_TIME]),
    )


def _row_to_endpoint(row: Row) -> Endpoint:
    service_id = int(row[SERVICE_ID])
    detect_point = DetectPoint(row[DETECT_POINT])
    return Endpoint(
        id=Endpoint.build_id(service_id, row[NAME], detect_point),
        name=row[NAME],
        service_id=service_id,
        detect_point=detect_point,
    )


def distinct_endpoints(endpoints: Iterable[Endpoint], limit: int) -> list[Endpoint]:
    """Drop repeated endpoint ids (first one wins) and keep at most *limit*."""
    seen: set[str] = set()
    result: list[Endpoint] = []
    for endpoint in endpoints:
        if len(result) >= limit:
            break
        if endpoint.id in seen:
            continue
        seen.add(endpoint.id)
        result.append(endpoint)
    return result


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class MetadataQueryService:
    """Typed lookups over the inventory tables.

    Args:
        executor: Runs SQL inside a scoped connection.
        config: Supplies the row cap for list/search operations.
    """

    def __init__(self, executor: QueryExecutor, config: QueryConfig) -> None:
        self._executor = executor
        self._max_size = config.metadata_query_max_size

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _fetch(self, sql: str, params: Sequence[Any], mapper: Callable[[Row], T]) -> list[T]:
        with self._executor.connection() as conn:
            rows = self._executor.query(conn, sql, params)
            return [mapper(row) for row in rows]

    def _num(self, table: str, where: Predicate) -> int:
        sql, params = count(table, where)
        nums = self._fetch(sql, params, lambda row: int(row["num"] or 0))
        return nums[0] if nums else 0

    @staticmethod
    def _live_services(start: int, end: int, node_type: NodeType) -> Predicate:
        return and_(
            time_range_overlap(start, end),
            eq(IS_ADDRESS, _FALSE),
            eq(NODE_TYPE, int(node_type)),
        )

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    def num_of_services(self, start: int, end: int) -> int:
        """Count live, non-address services of the ``NORMAL`` node type."""
        return self._num(SERVICE_INVENTORY, self._live_services(start, end, NodeType.NORMAL))

    def num_of_endpoints(self) -> int:
        """Count server-side endpoint rows.  No time window applies."""
        return self._num(ENDPOINT_TRAFFIC, eq(DETECT_POINT, int(DetectPoint.SERVER)))

    def num_of_node_type(self, node_type: NodeType) -> int:
        """Count every service row of *node_type*, regardless of time."""
        return self._num(SERVICE_INVENTORY, eq(NODE_TYPE, int(node_type)))

    def cluster_brief(self, start: int, end: int) -> ClusterBrief:
        return ClusterBrief(
            num_of_service=self.num_of_services(start, end),
            num_of_endpoint=self.num_of_endpoints(),
            num_of_database=self.num_of_node_type(NodeType.DATABASE),
            num_of_cache=self.num_of_node_type(NodeType.CACHE),
            num_of_mq=self.num_of_node_type(NodeType.MQ),
        )

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def get_all_services(self, start: int, end: int) -> list[Service]:
        sql, params = select(
            SERVICE_INVENTORY,
            self._live_services(start, end, NodeType.NORMAL),
            limit=self._max_size,
        )
        return self._fetch(sql, params, _row_to_service)

    def get_all_browser_services(self, start: int, end: int) -> list[Service]:
        sql, params = select(
            SERVICE_INVENTORY,
            self._live_services(start, end, NodeType.BROWSER),
            limit=self._max_size,
        )
        return self._fetch(sql, params, _row_to_service)

    def search_services(
        self, start: int, end: int, keyword: Optional[str] = None
    ) -> list[Service]:
        """Live normal services whose name contains *keyword* (all if empty)."""
        where = self._live_services(start, end, NodeType.NORMAL)
        if keyword:
            where = where & contains(NAME, keyword)
        sql, params = select(SERVICE_INVENTORY, where, limit=self._max_size)
        return self._fetch(sql, params, _row_to_service)

    def search_service(self, name: str) -> Optional[Service]:
        """Exact-name lookup of a non-address service; ``None`` if absent."""
        sql, params = select(
            SERVICE_INVENTORY,
            and_(eq(IS_ADDRESS, _FALSE), eq(NAME, name)),
            limit=1,
        )
        services = self._fetch(sql, params, _row_to_service)
        return services[0] if services else None

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def get_all_databases(self) -> list[Database]:
        sql, params = select(
            SERVICE_INVENTORY,
            eq(NODE_TYPE, int(NodeType.DATABASE)),
            limit=self._max_size,
        )
        return self._fetch(sql, params, _row_to_database)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def search_endpoints(
        self, keyword: Optional[str], service_id: int, limit: int
    ) -> list[Endpoint]:
        """Server-side endpoints of *service_id*, best effort.

        Fetches up to ``7 * limit`` rows which may contain the same logical
        endpoint several times; pass the result through
        :func:`distinct_endpoints` to get at most *limit* unique entries.

        Raises:
            ValueError: If *limit* is less than 1.
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        where = eq(SERVICE_ID, service_id)
        if keyword:
            where = where & contains(NAME, keyword)
        where = where & eq(DETECT_POINT, int(DetectPoint.SERVER))
        sql, params = select(
            ENDPOINT_TRAFFIC, where, limit=limit * ENDPOINT_FETCH_MULTIPLIER
        )
        return self._fetch(sql, params, _row_to_endpoint)

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def get_service_instances(
        self, start: int, end: int, service_id: int
    ) -> list[ServiceInstance]:
        sql, params = select(
            SERVICE_INSTANCE_INVENTORY,
            and_(time_range_overlap(start, end), eq(SERVICE_ID, service_id)),
        )
        return self._fetch(sql, params, _row_to_instance)
