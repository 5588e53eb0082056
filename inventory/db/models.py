"""Dataclass models for inventory query results.

These are plain Python objects – not ORM models.  Each query builds them
fresh from rows; they are frozen so results can be shared freely.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional

# Separator used when composing derived ids.
ID_SPLIT = "_"

UNKNOWN_DATABASE_TYPE = "UNKNOWN"


class NodeType(IntEnum):
    """Classification of a ``service_inventory`` row."""

    NORMAL = 0
    DATABASE = 1
    RPC_FRAMEWORK = 2
    HTTP = 3
    MQ = 4
    CACHE = 5
    BROWSER = 6
    UNRECOGNIZED = 10

    @classmethod
    def _missing_(cls, value: object) -> "NodeType":
        # Collectors may write types this reader does not know yet.
        return cls.UNRECOGNIZED


class DetectPoint(IntEnum):
    """Which side of a call observed an endpoint."""

    SERVER = 0
    CLIENT = 1
    PROXY = 2


class Language(str, Enum):
    JAVA = "java"
    DOTNET = "dotnet"
    NODEJS = "nodejs"
    PYTHON = "python"
    RUBY = "ruby"
    GO = "go"
    LUA = "lua"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Language":
        """Map the agent-reported language string, ``UNKNOWN`` if unrecognised."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Attribute:
    name: str
    value: str


@dataclass(frozen=True)
class Service:
    id: int
    name: str
    node_type: NodeType = NodeType.NORMAL
    is_address: bool = False
    register_time: int = 0
    heartbeat_time: int = 0
    properties: Optional[str] = None


@dataclass(frozen=True)
class ServiceInstance:
    id: str
    service_id: int
    name: str
    instance_uuid: str
    language: Language = Language.UNKNOWN
    attributes: tuple[Attribute, ...] = field(default_factory=tuple)
    register_time: int = 0
    heartbeat_time: int = 0


@dataclass(frozen=True)
class Endpoint:
    id: str
    name: str
    service_id: int
    detect_point: DetectPoint = DetectPoint.SERVER

    @staticmethod
    def build_id(service_id: int, name: str, detect_point: int) -> str:
        """Derive the logical endpoint id; never stored, always recomputed."""
        encoded = base64.b64encode(name.encode("utf-8")).decode("utf-8")
        return f"{service_id}{ID_SPLIT}{encoded}{ID_SPLIT}{int(detect_point)}"


@dataclass(frozen=True)
class Database:
    id: int
    name: str
    type: str = UNKNOWN_DATABASE_TYPE


@dataclass(frozen=True)
class ClusterBrief:
    num_of_service: int
    num_of_endpoint: int
    num_of_database: int
    num_of_cache: int
    num_of_mq: int
