"""Tests for the command line, driven through click's CliRunner."""

from click.testing import CliRunner

from logstash_exporter import __version__
from logstash_exporter.main import cli


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_scrape_against_healthy_node(logstash_server):
    url = logstash_server()
    result = CliRunner().invoke(cli, ["--logstash.endpoint", url, "scrape"])

    assert result.exit_code == 0, result.output
    assert "node" in result.output
    assert "info" in result.output
    assert "success" in result.output
    assert "error" not in result.output
    assert "samples" in result.output


def test_scrape_reports_failures_with_exit_code(logstash_server):
    url = logstash_server({"/_node/stats": (500, "nope"), "/_node": (500, "nope")})
    result = CliRunner().invoke(cli, ["--logstash.endpoint", url, "scrape"])

    assert result.exit_code == 1
    assert "error" in result.output


def test_scrape_with_invalid_endpoint_has_no_collectors():
    result = CliRunner().invoke(cli, ["--logstash.endpoint", "not a url", "scrape"])
    assert result.exit_code == 1
    assert "0 samples" in result.output


def test_invalid_listen_address_is_a_usage_error():
    result = CliRunner().invoke(cli, ["--web.listen-address", "nonsense", "scrape"])
    assert result.exit_code == 2
    assert "listen address" in result.output
