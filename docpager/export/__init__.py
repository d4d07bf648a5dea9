from .text_exporter import TextExporter

__all__ = ["TextExporter"]
