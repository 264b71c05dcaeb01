"""Input builders: discovered entities -> Telegraf input records.

Every builder walks its targets in sorted key order so that rendered
output does not depend on how the caller's mappings were populated.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from discovery.models.schemas import BaseConfig, Labels, Object
from discovery.telegraf.config import Config
from discovery.telegraf.inputs import (
    InputDNSQuery,
    InputDNSQueryOptions,
    InputHTTPResponse,
    InputHTTPResponseOptions,
    InputNetResponse,
    InputNetResponseOptions,
    InputPrometheusHttp,
    InputPrometheusHttpFile,
    InputPrometheusHttpMetric,
    InputPrometheusHttpOptions,
    InputX509Cert,
    InputX509CertOptions,
    include_tags,
    sorted_labels,
)

Renderer = Callable[[str, Mapping[str, Any]], str]


class MetricsNotFoundError(ValueError):
    """Raised when a service yields no metric records at all."""


def build_dns_query(config: Config, opts: InputDNSQueryOptions, domains: Mapping[str, Labels]) -> None:
    servers = sorted({s.strip() for s in opts.servers.split(",") if s.strip()})

    for k in sorted(domains):
        labels = sorted_labels(domains[k])
        config.add(InputDNSQuery(
            interval=opts.interval,
            servers=servers,
            domains=[k],
            network=opts.network,
            record_type=opts.record_type,
            port=opts.port,
            timeout=opts.timeout,
            include=include_tags(opts.tags, labels),
            tags=labels,
        ))


def build_http_response(config: Config, opts: InputHTTPResponseOptions, urls: Mapping[str, Labels]) -> None:
    for k in sorted(urls):
        labels = sorted_labels(urls[k])
        config.add(InputHTTPResponse(
            interval=opts.interval,
            urls=[k],
            timeout=opts.timeout,
            method=opts.method,
            follow_redirects=opts.follow_redirects,
            string_match=opts.string_match,
            status_code=opts.status_code or None,
            insecure_skip_verify=True,
            include=include_tags(opts.tags, labels),
            tags=labels,
        ))


def build_net_response(config: Config, opts: InputNetResponseOptions, addresses: Mapping[str, Labels], protocol: str) -> None:
    for k in sorted(addresses):
        labels = sorted_labels(addresses[k])
        config.add(InputNetResponse(
            interval=opts.interval,
            address=k,
            protocol=protocol,
            timeout=opts.timeout,
            read_timeout=opts.read_timeout,
            send=opts.send,
            expect=opts.expect,
            include=include_tags(opts.tags, labels),
            tags=labels,
        ))


def build_x509_cert(config: Config, opts: InputX509CertOptions, addresses: Mapping[str, Labels]) -> None:
    for k in sorted(addresses):
        labels = sorted_labels(addresses[k])
        config.add(InputX509Cert(
            interval=opts.interval,
            sources=[k],
            timeout=opts.timeout,
            server_name=opts.server_name,
            exclude_root_certs=opts.exclude_root_certs,
            tls_ca=opts.tls_ca,
            tls_cert=opts.tls_cert,
            tls_key=opts.tls_key,
            tls_server_name=opts.tls_server_name,
            use_proxy=opts.use_proxy,
            proxy_url=opts.proxy_url,
            include=include_tags(opts.tags, labels),
            tags=labels,
        ))


def apply_vars(query: str, vars: Mapping[str, str], var_format: str) -> str:
    """Substitute ``var_format % key`` placeholders, longest key first."""
    for k in sorted(vars, key=lambda x: (-len(x), x)):
        query = query.replace(var_format % k, vars[k])
    return query


def parse_tags(text: str) -> Labels:
    """Parse rendered ``key=value`` lines into labels."""
    tags: Labels = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep and key.strip():
            tags[key.strip()] = value.strip()
    return tags


class _PrometheusHttpBuilder:
    """Collects quality, availability and metric sub-records for one service."""

    def __init__(self, opts: InputPrometheusHttpOptions, labels_template: str,
                 files: Dict[str, Any], renderer: Optional[Renderer]):
        self.opts = opts
        self.labels_template = labels_template
        self.files = files
        self.renderer = renderer
        self.metrics: List[InputPrometheusHttpMetric] = []

    def _tags(self, labels: Labels, vars: Dict[str, str], item_labels: Labels, kind: str, name: str) -> Labels:
        tags = {**labels, **item_labels}
        if self.labels_template and self.renderer is not None:
            ctx = {**vars, "labels": tags, "files": self.files}
            tags.update(parse_tags(self.renderer(self.labels_template, ctx)))
        tags[kind] = name
        return sorted_labels({k: v for k, v in tags.items() if v})

    def _add(self, kind: str, query: str, tags: Labels, unique_by: Optional[List[str]] = None) -> None:
        self.metrics.append(InputPrometheusHttpMetric(
            name=kind,
            query=query,
            unique_by=list(unique_by or []),
            tags=tags,
        ))

    def qualities(self, c: BaseConfig, labels: Labels, vars: Dict[str, str]) -> None:
        opts = self.opts
        for q in c.qualities:
            if q.disabled:
                continue
            if opts.quality_query:
                qvars = {
                    **vars,
                    "name": q.name,
                    "query": apply_vars(q.query, vars, opts.var_format),
                    "range": q.range or opts.quality_range,
                    "every": q.every or opts.quality_every,
                    "points": str(q.points or opts.quality_points),
                }
                query = apply_vars(opts.quality_query, qvars, opts.var_format)
            else:
                query = apply_vars(q.query, vars, opts.var_format)
            if not query:
                continue
            tags = self._tags(labels, vars, q.labels, opts.quality_name, q.name)
            self._add(opts.quality_name, query, tags)

    def availability(self, c: BaseConfig, labels: Labels, vars: Dict[str, str]) -> None:
        opts = self.opts
        for a in c.availability:
            if a.disabled or not a.query:
                continue
            tags = self._tags(labels, vars, a.labels, opts.availability_name, a.name)
            self._add(opts.availability_name, apply_vars(a.query, vars, opts.var_format), tags)

    def passthrough(self, c: BaseConfig, labels: Labels, vars: Dict[str, str]) -> None:
        opts = self.opts
        for m in c.metrics:
            if m.disabled or not m.query:
                continue
            tags = self._tags(labels, vars, m.labels, opts.metric_name, m.name)
            self._add(opts.metric_name, apply_vars(m.query, vars, opts.var_format), tags, m.unique_by)


def build_prometheus_http(
    config: Config,
    obj: Object,
    opts: InputPrometheusHttpOptions,
    name: str,
    labels_template: str = "",
    renderer: Optional[Renderer] = None,
) -> None:
    """Add one prometheus_http record covering every base config of ``obj``.

    Raises MetricsNotFoundError when no sub-record could be produced; the
    container is left untouched in that case.
    """
    record = InputPrometheusHttp(
        name=name,
        url=opts.url,
        user=opts.user,
        password=opts.password,
        version=opts.version,
        params=opts.params,
        interval=opts.interval,
        timeout=opts.timeout,
        duration=opts.duration,
        prefix=opts.prefix,
        skip_empty_tags=True,
    )

    files: Dict[str, Any] = {}
    for k in sorted(obj.files):
        f = obj.files[k]
        record.file.append(InputPrometheusHttpFile(name=k, path=f.path, type=f.type))
        files[k] = f.obj

    builder = _PrometheusHttpBuilder(opts, labels_template, files, renderer)
    for k in sorted(obj.configs):
        c = obj.configs[k]
        # base config labels are used as-is, only vars are merged with the service
        labels = dict(c.labels)
        vars = {**obj.vars, **c.vars}

        builder.qualities(c, labels, vars)
        builder.availability(c, labels, vars)
        builder.passthrough(c, labels, vars)

    if not builder.metrics:
        raise MetricsNotFoundError("Metrics are not found.")

    record.metric = builder.metrics
    record.include = include_tags(opts.default_tags, *(m.tags for m in builder.metrics))
    config.add(record)
