"""Export cohort retention reports for spreadsheets, dashboards and audit trails."""

from .exports import (
    default_export_filename,
    export_report_csv,
    export_report_json,
    report_to_export_frame,
    report_to_serialisable,
)

__all__ = [
    "default_export_filename",
    "export_report_csv",
    "export_report_json",
    "report_to_export_frame",
    "report_to_serialisable",
]
