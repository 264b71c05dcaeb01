"""Telegraf configuration container and its persistence gate.

A Config collects input records from one or more builder calls and renders
them as a single TOML document. Rendering is deterministic: records keep
insertion order (builders insert in sorted key order), sections follow a
fixed order and empty values are dropped.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import tomli_w
from pydantic import BaseModel

from discovery.core.observability import Observability
from discovery.models.schemas import PersistResult, WriteStatus
from discovery.services.files import file_write_with_checksum
from discovery.telegraf.inputs import (
    InputDNSQuery,
    InputHTTPResponse,
    InputNetResponse,
    InputPrometheusHttp,
    InputX509Cert,
)

# section name per record type, in output order
SECTIONS = {
    InputPrometheusHttp: "prometheus_http",
    InputDNSQuery: "dns_query",
    InputHTTPResponse: "http_response",
    InputNetResponse: "net_response",
    InputX509Cert: "x509_cert",
}


def _compact(value: Any) -> Any:
    """Drop None, empty strings, empty lists and empty tables, recursively.

    Label values under ``tags`` are kept as they are, empty ones included.
    """
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if k != "tags":
                v = _compact(v)
            if v is None or v == "" or v == [] or v == {}:
                continue
            out[k] = v
        return out
    if isinstance(value, list):
        return [_compact(v) for v in value]
    return value


class Config:
    """Ordered collection of Telegraf input records."""

    def __init__(self, observability: Observability):
        self.observability = observability
        self.inputs: Dict[str, List[BaseModel]] = {name: [] for name in SECTIONS.values()}

    def add(self, record: BaseModel) -> None:
        name = SECTIONS[type(record)]
        self.inputs[name].append(record)
        self.observability.records.labels(input=name).inc()

    def records(self, section: str) -> List[BaseModel]:
        return self.inputs[section]

    def render(self) -> bytes:
        """Render all records as TOML; an empty container renders to b''."""
        inputs = {}
        for name, records in self.inputs.items():
            if not records:
                continue
            inputs[name] = [_compact(r.model_dump(by_alias=True)) for r in records]
        if not inputs:
            return b""
        return tomli_w.dumps({"inputs": inputs}).encode("utf-8")

    def create_with_template_if_checksum_is_different(
        self,
        source: str,
        template: Optional[str],
        path: str,
        checksum: bool,
        data: Optional[bytes],
    ) -> PersistResult:
        """Persist ``data`` (plus the static ``template``) to ``path``.

        Empty data is never written. The template is appended after a single
        newline before the checksum comparison. I/O failures are logged and
        reported in the result, never raised.
        """
        logger = self.observability.logs()

        if not data:
            logger.debug("%s: No query config", source)
            return self._result(source, path, WriteStatus.SKIPPED)

        if template:
            data = b"\n".join([data, template.encode("utf-8")])

        try:
            exists = file_write_with_checksum(path, data, checksum)
        except OSError as e:
            logger.error("%s: Cannot create file %s error: %s", source, path, e)
            return self._result(source, path, WriteStatus.FAILED, str(e))

        if exists:
            logger.debug("%s: File %s exists, skipped", source, path)
            return self._result(source, path, WriteStatus.UNCHANGED)

        logger.debug("%s: File %s created or replaced", source, path)
        return self._result(source, path, WriteStatus.WRITTEN)

    def create_if_checksum_is_different(self, source: str, path: str, checksum: bool, data: Optional[bytes]) -> PersistResult:
        return self.create_with_template_if_checksum_is_different(source, "", path, checksum, data)

    def _result(self, source: str, path: str, status: WriteStatus, error: Optional[str] = None) -> PersistResult:
        self.observability.files.labels(source=source, status=status.value).inc()
        return PersistResult(source=source, path=path, status=status, error=error)
