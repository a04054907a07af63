"""Input/output for floor plan documents and reports."""

from .export import export_csv, export_json, to_export_dict
from .parser import load_plan, plan_from_dict

__all__ = ["export_csv", "export_json", "to_export_dict", "load_plan", "plan_from_dict"]
