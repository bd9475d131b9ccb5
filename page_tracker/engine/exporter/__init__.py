"""Exporter SPI and implementations."""

from .base import BaseExporter
from .csv_exporter import FIELDNAMES, CsvExporter

__all__ = ["BaseExporter", "CsvExporter", "FIELDNAMES"]
