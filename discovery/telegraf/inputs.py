"""Telegraf input records and the options they are built from.

Field declaration order is the order keys appear in the rendered TOML,
``serialization_alias`` is the TOML key.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from discovery.models.schemas import Labels


# ------- options -------

class InputPrometheusHttpOptions(BaseModel):
    url: str = ""
    user: str = ""
    password: str = ""
    version: str = "v1"
    params: str = ""
    interval: str = "10s"
    timeout: str = "5s"
    duration: str = ""
    prefix: str = ""
    quality_name: str = "quality"
    quality_range: str = "5m"
    quality_every: str = "15s"
    quality_points: int = 20
    quality_query: str = ""
    availability_name: str = "availability"
    metric_name: str = "metric"
    default_tags: List[str] = Field(default_factory=list)
    var_format: str = "$%s"


class InputDNSQueryOptions(BaseModel):
    interval: str = "10s"
    servers: str = ""  # comma separated
    network: str = "udp"
    record_type: str = "A"
    port: int = 53
    timeout: int = 2
    tags: List[str] = Field(default_factory=list)


class InputHTTPResponseOptions(BaseModel):
    interval: str = "10s"
    method: str = "GET"
    follow_redirects: bool = False
    string_match: str = ""
    status_code: int = 0  # 0 = not checked
    timeout: str = "5s"
    tags: List[str] = Field(default_factory=list)


class InputNetResponseOptions(BaseModel):
    """Options shared by every net_response protocol."""
    interval: str = "10s"
    timeout: str = "5s"
    read_timeout: str = "3s"
    send: str = ""
    expect: str = ""
    tags: List[str] = Field(default_factory=list)


class InputX509CertOptions(BaseModel):
    interval: str = "10s"
    timeout: str = "5s"
    server_name: str = ""
    exclude_root_certs: bool = False
    tls_ca: str = ""
    tls_cert: str = ""
    tls_key: str = ""
    tls_server_name: str = ""
    use_proxy: bool = False
    proxy_url: str = ""
    tags: List[str] = Field(default_factory=list)


# ------- records -------

class InputPrometheusHttpMetric(BaseModel):
    name: str
    query: str
    unique_by: List[str] = Field(default_factory=list)
    tags: Labels = Field(default_factory=dict)


class InputPrometheusHttpFile(BaseModel):
    name: str
    path: str = ""
    type: str = ""


class InputPrometheusHttp(BaseModel):
    name: str = ""
    url: str = ""
    user: str = Field(default="", serialization_alias="username")
    password: str = ""
    version: str = ""
    params: str = ""
    interval: str = ""
    timeout: str = ""
    duration: str = ""
    prefix: str = ""
    skip_empty_tags: bool = True
    include: List[str] = Field(default_factory=list, serialization_alias="taginclude")
    tags: Labels = Field(default_factory=dict)
    metric: List[InputPrometheusHttpMetric] = Field(default_factory=list)
    file: List[InputPrometheusHttpFile] = Field(default_factory=list)


class InputDNSQuery(BaseModel):
    interval: str = ""
    servers: List[str] = Field(default_factory=list)
    domains: List[str] = Field(default_factory=list)
    network: str = ""
    record_type: str = ""
    port: int = 53
    timeout: int = 2
    include: List[str] = Field(default_factory=list, serialization_alias="taginclude")
    tags: Labels = Field(default_factory=dict)


class InputHTTPResponse(BaseModel):
    interval: str = ""
    urls: List[str] = Field(default_factory=list)
    timeout: str = ""
    method: str = ""
    follow_redirects: bool = False
    string_match: str = Field(default="", serialization_alias="response_string_match")
    status_code: Optional[int] = Field(default=None, serialization_alias="response_status_code")
    insecure_skip_verify: bool = True
    include: List[str] = Field(default_factory=list, serialization_alias="taginclude")
    tags: Labels = Field(default_factory=dict)


class InputNetResponse(BaseModel):
    interval: str = ""
    address: str = ""
    protocol: str = ""
    timeout: str = ""
    read_timeout: str = ""
    send: str = ""
    expect: str = ""
    include: List[str] = Field(default_factory=list, serialization_alias="taginclude")
    tags: Labels = Field(default_factory=dict)


class InputX509Cert(BaseModel):
    interval: str = ""
    sources: List[str] = Field(default_factory=list)
    timeout: str = ""
    server_name: str = ""
    exclude_root_certs: bool = False
    tls_ca: str = ""
    tls_cert: str = ""
    tls_key: str = ""
    tls_server_name: str = ""
    use_proxy: bool = False
    proxy_url: str = ""
    include: List[str] = Field(default_factory=list, serialization_alias="taginclude")
    tags: Labels = Field(default_factory=dict)


def include_tags(defaults: Iterable[str], *label_sets: Mapping[str, str]) -> List[str]:
    """Sorted, de-duplicated union of default tag names and label keys."""
    names = {t.strip() for t in defaults if t and t.strip()}
    for labels in label_sets:
        names.update(k for k in labels if k)
    return sorted(names)


def sorted_labels(labels: Optional[Mapping[str, str]]) -> Labels:
    return dict(sorted((labels or {}).items()))
