"""Inventory lookup endpoints.

Routes
------
GET /metadata/brief                          Counts of services, endpoints, databases …
GET /metadata/services                       Live services (optional ?keyword=)
GET /metadata/services/browser               Live browser services
GET /metadata/services/by-name/{name}        Exact-name lookup
GET /metadata/services/{id}/instances        Live instances of a service
GET /metadata/services/{id}/endpoints        Server endpoints of a service (?keyword=&limit=)
GET /metadata/databases                      Database-type services

``start`` / ``end`` are epoch milliseconds; when omitted the window is the
last 15 minutes.  Storage failures are reported as 503.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from inventory.db import MetadataQueryService, StorageError, distinct_endpoints
from inventory.db.models import Database, Endpoint, Service, ServiceInstance
from inventory.timeutil import resolve_window

router = APIRouter()

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class ClusterBriefResponse(BaseModel):
    num_of_service: int
    num_of_endpoint: int
    num_of_database: int
    num_of_cache: int
    num_of_mq: int


class ServiceResponse(BaseModel):
    id: int
    name: str


class AttributeResponse(BaseModel):
    name: str
    value: str


class ServiceInstanceResponse(BaseModel):
    id: str
    name: str
    instance_uuid: str
    language: str
    attributes: list[AttributeResponse]


class EndpointResponse(BaseModel):
    id: str
    name: str


class DatabaseResponse(BaseModel):
    id: int
    name: str
    type: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _service(request: Request) -> MetadataQueryService:
    return request.app.state.metadata


def _window(start: Optional[int], end: Optional[int]) -> tuple[int, int]:
    try:
        return resolve_window(start, end)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _run(call: Callable[[], T]) -> T:
    try:
        return call()
    except StorageError as exc:
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {exc}") from exc


def _service_response(service: Service) -> dict[str, Any]:
    return {"id": service.id, "name": service.name}


def _instance_response(instance: ServiceInstance) -> dict[str, Any]:
    return {
        "id": instance.id,
        "name": instance.name,
        "instance_uuid": instance.instance_uuid,
        "language": instance.language.value,
        "attributes": [{"name": a.name, "value": a.value} for a in instance.attributes],
    }


def _endpoint_response(endpoint: Endpoint) -> dict[str, Any]:
    return {"id": endpoint.id, "name": endpoint.name}


def _database_response(database: Database) -> dict[str, Any]:
    return {"id": database.id, "name": database.name, "type": database.type}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/brief", response_model=ClusterBriefResponse)
def brief(
    request: Request, start: Optional[int] = None, end: Optional[int] = None
) -> dict[str, Any]:
    """Return inventory counts for the window."""
    start, end = _window(start, end)
    result = _run(lambda: _service(request).cluster_brief(start, end))
    return {
        "num_of_service": result.num_of_service,
        "num_of_endpoint": result.num_of_endpoint,
        "num_of_database": result.num_of_database,
        "num_of_cache": result.num_of_cache,
        "num_of_mq": result.num_of_mq,
    }


@router.get("/services", response_model=list[ServiceResponse])
def services(
    request: Request,
    start: Optional[int] = None,
    end: Optional[int] = None,
    keyword: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Live services, optionally filtered by a name substring."""
    start, end = _window(start, end)
    found = _run(lambda: _service(request).search_services(start, end, keyword))
    return [_service_response(s) for s in found]


@router.get("/services/browser", response_model=list[ServiceResponse])
def browser_services(
    request: Request, start: Optional[int] = None, end: Optional[int] = None
) -> list[dict[str, Any]]:
    start, end = _window(start, end)
    found = _run(lambda: _service(request).get_all_browser_services(start, end))
    return [_service_response(s) for s in found]


@router.get("/services/by-name/{name}", response_model=ServiceResponse)
def service_by_name(name: str, request: Request) -> dict[str, Any]:
    """Look a service up by its exact name."""
    service = _run(lambda: _service(request).search_service(name))
    if service is None:
        raise HTTPException(status_code=404, detail=f"Service not found: {name!r}")
    return _service_response(service)


@router.get("/services/{service_id}/instances", response_model=list[ServiceInstanceResponse])
def service_instances(
    service_id: int,
    request: Request,
    start: Optional[int] = None,
    end: Optional[int] = None,
) -> list[dict[str, Any]]:
    start, end = _window(start, end)
    found = _run(lambda: _service(request).get_service_instances(start, end, service_id))
    return [_instance_response(i) for i in found]


@router.get("/services/{service_id}/endpoints", response_model=list[EndpointResponse])
def service_endpoints(
    service_id: int,
    request: Request,
    keyword: Optional[str] = None,
    limit: int = Query(20, ge=1, le=1000),
) -> list[dict[str, Any]]:
    """Server endpoints of a service, de-duplicated and truncated to *limit*."""
    found = _run(lambda: _service(request).search_endpoints(keyword, service_id, limit))
    return [_endpoint_response(e) for e in distinct_endpoints(found, limit)]


@router.get("/databases", response_model=list[DatabaseResponse])
def databases(request: Request) -> list[dict[str, Any]]:
    found = _run(lambda: _service(request).get_all_databases())
    return [_database_response(d) for d in found]
