"""Prometheus exporter for the Logstash monitoring API."""

__version__ = "0.4.0"
