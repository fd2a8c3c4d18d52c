"""Exporter SPI and implementations."""

from .base import BaseExporter
from .file_exporter import FileExporter

__all__ = ["BaseExporter", "FileExporter"]
