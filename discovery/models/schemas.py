"""Pydantic models for discovered entities and sink results."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Labels = Dict[str, str]


class File(BaseModel):
    """A named input artifact referenced by a discovered service."""
    name: str = ""
    path: str = ""
    type: str = ""
    obj: Any = None  # decoded payload, never serialized


class BaseQuality(BaseModel):
    """Quality-window check; range/every/points fall back to sink options."""
    name: str
    query: str = ""
    range: Optional[str] = None
    every: Optional[str] = None
    points: Optional[int] = None
    labels: Labels = Field(default_factory=dict)
    disabled: bool = False


class BaseAvailability(BaseModel):
    name: str
    query: str = ""
    labels: Labels = Field(default_factory=dict)
    disabled: bool = False


class BaseMetric(BaseModel):
    name: str
    query: str = ""
    unique_by: List[str] = Field(default_factory=list)
    labels: Labels = Field(default_factory=dict)
    disabled: bool = False


class BaseConfig(BaseModel):
    """Named rule set producing derived probes for a service."""
    labels: Labels = Field(default_factory=dict)
    vars: Dict[str, str] = Field(default_factory=dict)
    qualities: List[BaseQuality] = Field(default_factory=list)
    availability: List[BaseAvailability] = Field(default_factory=list)
    metrics: List[BaseMetric] = Field(default_factory=list)


class Object(BaseModel):
    """A discovered service bundle of vars, files and base configs."""
    vars: Dict[str, str] = Field(default_factory=dict)
    files: Dict[str, File] = Field(default_factory=dict)
    configs: Dict[str, BaseConfig] = Field(default_factory=dict)
    metrics: List[str] = Field(default_factory=list)


class SignalConnection(BaseModel):
    """Connection options resolved by the Signal discovery itself."""
    url: str = ""
    user: str = ""
    password: str = ""


class SignalDiscovery(BaseModel):
    """Signal discovery result: service key -> Object."""
    kind: Literal["Signal"] = "Signal"
    source: str
    services: Dict[str, Object] = Field(default_factory=dict)
    options: SignalConnection = Field(default_factory=SignalConnection)


class LabelsDiscovery(BaseModel):
    """Cert/DNS/HTTP/TCP discovery result: target key -> Labels."""
    kind: str
    source: str
    targets: Dict[str, Labels] = Field(default_factory=dict)


class WriteStatus(str, Enum):
    """Outcome of a persistence attempt."""
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    WRITTEN = "written"
    FAILED = "failed"


class PersistResult(BaseModel):
    source: str
    path: str
    status: WriteStatus
    error: Optional[str] = None
