# tests/test_config.py
import os
import stat
import tomllib

from discovery.models.schemas import WriteStatus
from discovery.telegraf.builders import build_dns_query, build_net_response, build_x509_cert
from discovery.telegraf.config import Config
from discovery.telegraf.inputs import (
    InputDNSQuery,
    InputDNSQueryOptions,
    InputNetResponseOptions,
    InputX509CertOptions,
)

OPTS = InputDNSQueryOptions(servers="8.8.8.8", tags=["env"])


def _dns_bytes(observability, domains) -> bytes:
    config = Config(observability)
    build_dns_query(config, OPTS, domains)
    return config.render()


# --- serialization ----------------------------------------------------------

def test_render_is_independent_of_input_order(observability):
    one = {"b.com": {"env": "prod", "team": "x"}, "a.com": {"team": "y", "env": "dev"}}
    two = {"a.com": {"env": "dev", "team": "y"}, "b.com": {"team": "x", "env": "prod"}}

    assert _dns_bytes(observability, one) == _dns_bytes(observability, two)


def test_render_twice_is_identical(observability):
    config = Config(observability)
    build_dns_query(config, OPTS, {"a.com": {"env": "dev"}})
    build_x509_cert(config, InputX509CertOptions(), {"https://a.com": {}})

    assert config.render() == config.render()


def test_empty_sections_are_absent(observability):
    config = Config(observability)
    build_dns_query(config, OPTS, {"a.com": {}})
    build_net_response(config, InputNetResponseOptions(), {}, "tcp")

    doc = tomllib.loads(config.render().decode("utf-8"))

    assert list(doc["inputs"]) == ["dns_query"]


def test_empty_label_values_are_kept(observability):
    doc = tomllib.loads(_dns_bytes(observability, {"a.com": {"env": ""}}).decode("utf-8"))

    record = doc["inputs"]["dns_query"][0]
    assert record["taginclude"] == ["env"]
    assert record["tags"] == {"env": ""}


def test_empty_container_renders_nothing(observability):
    assert Config(observability).render() == b""


def test_add_keeps_insertion_order(observability):
    config = Config(observability)
    config.add(InputDNSQuery(domains=["z.com"]))
    config.add(InputDNSQuery(domains=["a.com"]))

    doc = tomllib.loads(config.render().decode("utf-8"))

    assert [r["domains"] for r in doc["inputs"]["dns_query"]] == [["z.com"], ["a.com"]]


def test_add_counts_records(observability):
    config = Config(observability)
    build_dns_query(config, OPTS, {"a.com": {}, "b.com": {}})

    assert observability.registry.get_sample_value(
        "discovery_telegraf_records_total", {"input": "dns_query"}) == 2.0


# --- persistence gate -------------------------------------------------------

def test_checksum_gate_writes_once(observability, tmp_path):
    path = tmp_path / "dns.conf"
    config = Config(observability)
    data = _dns_bytes(observability, {"a.com": {"env": "dev"}})

    first = config.create_if_checksum_is_different("dns", str(path), True, data)
    before = os.stat(path)
    second = config.create_if_checksum_is_different("dns", str(path), True, data)
    after = os.stat(path)

    assert first.status == WriteStatus.WRITTEN
    assert second.status == WriteStatus.UNCHANGED
    assert path.read_bytes() == data
    assert (before.st_ino, before.st_mtime_ns) == (after.st_ino, after.st_mtime_ns)
    assert observability.registry.get_sample_value(
        "discovery_telegraf_files_total", {"source": "dns", "status": "unchanged"}) == 1.0


def test_label_change_is_detected(observability, tmp_path):
    path = str(tmp_path / "dns.conf")
    config = Config(observability)

    config.create_if_checksum_is_different("dns", path, True, _dns_bytes(observability, {"a.com": {"env": "dev"}}))
    result = config.create_if_checksum_is_different("dns", path, True, _dns_bytes(observability, {"a.com": {"env": "prod"}}))

    assert result.status == WriteStatus.WRITTEN
    assert 'env = "prod"' in open(path, encoding="utf-8").read()


def test_without_checksum_always_writes(observability, tmp_path):
    path = str(tmp_path / "dns.conf")
    config = Config(observability)

    config.create_if_checksum_is_different("dns", path, False, b"a = 1\n")
    result = config.create_if_checksum_is_different("dns", path, False, b"a = 1\n")

    assert result.status == WriteStatus.WRITTEN


def test_empty_data_is_skipped(observability, tmp_path):
    path = tmp_path / "dns.conf"
    config = Config(observability)

    r1 = config.create_with_template_if_checksum_is_different("dns", "[agent]\n", str(path), True, b"")
    r2 = config.create_with_template_if_checksum_is_different("dns", "[agent]\n", str(path), False, None)

    assert r1.status == WriteStatus.SKIPPED
    assert r2.status == WriteStatus.SKIPPED
    assert not path.exists()


def test_template_is_appended_after_newline(observability, tmp_path):
    path = tmp_path / "dns.conf"
    config = Config(observability)

    config.create_with_template_if_checksum_is_different("dns", "T", str(path), True, b"B")
    assert path.read_bytes() == b"B\nT"

    config.create_with_template_if_checksum_is_different("dns", "", str(path), True, b"B")
    assert path.read_bytes() == b"B"


def test_template_change_triggers_rewrite(observability, tmp_path):
    path = str(tmp_path / "dns.conf")
    config = Config(observability)

    config.create_with_template_if_checksum_is_different("dns", "T1", path, True, b"B")
    same = config.create_with_template_if_checksum_is_different("dns", "T1", path, True, b"B")
    changed = config.create_with_template_if_checksum_is_different("dns", "T2", path, True, b"B")

    assert same.status == WriteStatus.UNCHANGED
    assert changed.status == WriteStatus.WRITTEN


def test_directories_are_created_with_stable_mode(observability, tmp_path):
    path = tmp_path / "nested" / "dir" / "x.conf"
    config = Config(observability)

    config.create_if_checksum_is_different("dns", str(path), False, b"a = 1\n")
    mode1 = stat.S_IMODE(os.stat(path).st_mode)
    config.create_if_checksum_is_different("dns", str(path), False, b"a = 2\n")
    mode2 = stat.S_IMODE(os.stat(path).st_mode)

    assert mode1 == mode2 == 0o644


def test_io_error_is_reported_not_raised(observability, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    path = str(blocker / "x.conf")
    config = Config(observability)

    result = config.create_if_checksum_is_different("dns", path, True, b"a = 1\n")

    assert result.status == WriteStatus.FAILED
    assert result.path == path
    assert result.error
    assert observability.registry.get_sample_value(
        "discovery_telegraf_files_total", {"source": "dns", "status": "failed"}) == 1.0
