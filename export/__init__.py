"""Export module for JSON and plain-text reports."""
from export.json_exporter import export_json
from export.text_exporter import export_text_report

__all__ = ["export_json", "export_text_report"]
