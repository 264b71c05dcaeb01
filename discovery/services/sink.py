"""Telegraf sink: routes discovery results to builders and the persistence gate."""
from __future__ import annotations

from typing import List, Union

from pydantic import BaseModel, Field

from discovery.core.observability import Observability
from discovery.core.templates import render
from discovery.models.schemas import LabelsDiscovery, PersistResult, SignalDiscovery
from discovery.telegraf.builders import (
    MetricsNotFoundError,
    build_dns_query,
    build_http_response,
    build_net_response,
    build_prometheus_http,
    build_x509_cert,
)
from discovery.telegraf.config import Config
from discovery.telegraf.inputs import (
    InputDNSQueryOptions,
    InputHTTPResponseOptions,
    InputNetResponseOptions,
    InputPrometheusHttpOptions,
    InputX509CertOptions,
)


class TelegrafSignalOptions(InputPrometheusHttpOptions):
    """Signal options; ``template`` is the per-service output path template."""
    template: str = ""
    tags: str = ""  # labels template, rendered to key=value lines


class TelegrafCertOptions(InputX509CertOptions):
    template: str = ""
    conf: str = ""


class TelegrafDNSOptions(InputDNSQueryOptions):
    template: str = ""
    conf: str = ""


class TelegrafHTTPOptions(InputHTTPResponseOptions):
    template: str = ""
    conf: str = ""


class TelegrafTCPOptions(InputNetResponseOptions):
    template: str = ""
    conf: str = ""


class TelegrafOptions(BaseModel):
    signal: TelegrafSignalOptions = Field(default_factory=TelegrafSignalOptions)
    cert: TelegrafCertOptions = Field(default_factory=TelegrafCertOptions)
    dns: TelegrafDNSOptions = Field(default_factory=TelegrafDNSOptions)
    http: TelegrafHTTPOptions = Field(default_factory=TelegrafHTTPOptions)
    tcp: TelegrafTCPOptions = Field(default_factory=TelegrafTCPOptions)
    checksum: bool = False


Discovery = Union[SignalDiscovery, LabelsDiscovery]


class TelegrafSink:
    """Turns discovery results into Telegraf config files."""

    def __init__(self, options: TelegrafOptions, observability: Observability):
        self.options = options
        self.observability = observability
        self.logger = observability.logs()

    def _signal_options(self, d: SignalDiscovery) -> TelegrafSignalOptions:
        """Sink signal options with connection fields inherited from the discovery."""
        opts = self.options.signal
        return opts.model_copy(update={
            "url": opts.url or d.options.url,
            "user": opts.user or d.options.user,
            "password": opts.password or d.options.password,
        })

    def _render(self, template, variables) -> str:
        return render(template, variables, self.observability)

    def process_signal(self, d: SignalDiscovery) -> List[PersistResult]:
        opts = self._signal_options(d)
        source = d.source
        results: List[PersistResult] = []

        for k in sorted(d.services):
            s = d.services[k]
            path = self._render(opts.template, s.vars)
            if not path:
                self.logger.warning("%s: Service %s has no path, skipped", source, k)
                continue
            self.logger.debug("%s: Processing service: %s for path: %s", source, k, path)
            self.logger.debug("%s: Found metrics: %s", source, s.metrics)

            config = Config(self.observability)
            try:
                build_prometheus_http(config, s, opts, path, opts.tags, self._render)
            except MetricsNotFoundError as e:
                self.observability.errors.labels(source=source, kind="Signal").inc()
                self.logger.error("%s: Service %s error: %s", source, k, e)
                continue
            except Exception as e:
                self.observability.errors.labels(source=source, kind="Signal").inc()
                self.logger.exception("%s: Service %s cannot be built: %s", source, k, e)
                continue
            results.append(config.create_if_checksum_is_different(source, path, self.options.checksum, config.render()))

        return results

    def _process_labels(self, d: LabelsDiscovery, template: str, conf: str, build) -> List[PersistResult]:
        if not conf:
            self.logger.warning("%s: %s telegraf conf is not set, skipped", d.source, d.kind)
            return []
        config = Config(self.observability)
        build(config, d.targets)
        return [config.create_with_template_if_checksum_is_different(
            d.source, template, conf, self.options.checksum, config.render())]

    def process_cert(self, d: LabelsDiscovery) -> List[PersistResult]:
        opts = self.options.cert
        return self._process_labels(d, opts.template, opts.conf,
                                    lambda c, m: build_x509_cert(c, opts, m))

    def process_dns(self, d: LabelsDiscovery) -> List[PersistResult]:
        opts = self.options.dns
        return self._process_labels(d, opts.template, opts.conf,
                                    lambda c, m: build_dns_query(c, opts, m))

    def process_http(self, d: LabelsDiscovery) -> List[PersistResult]:
        opts = self.options.http
        return self._process_labels(d, opts.template, opts.conf,
                                    lambda c, m: build_http_response(c, opts, m))

    def process_tcp(self, d: LabelsDiscovery) -> List[PersistResult]:
        opts = self.options.tcp
        return self._process_labels(d, opts.template, opts.conf,
                                    lambda c, m: build_net_response(c, opts, m, "tcp"))

    def process(self, d: Discovery) -> List[PersistResult]:
        """Dispatch a discovery result by kind; unknown kinds are ignored."""
        count = len(d.services) if isinstance(d, SignalDiscovery) else len(d.targets)
        self.logger.debug("Telegraf has to process %d objects from %s...", count, d.kind)

        if isinstance(d, SignalDiscovery):
            return self.process_signal(d)

        handlers = {
            "Cert": self.process_cert,
            "DNS": self.process_dns,
            "HTTP": self.process_http,
            "TCP": self.process_tcp,
        }
        handler = handlers.get(d.kind)
        if handler is None:
            self.logger.debug("Telegraf has no support for %s", d.kind)
            return []
        return handler(d)
