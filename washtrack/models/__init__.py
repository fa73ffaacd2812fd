"""Database models."""

from washtrack.models.client import Client, Location
from washtrack.models.employee import Employee
from washtrack.models.vehicle import Vehicle, VehicleType
from washtrack.models.work_entry import WorkEntry
from washtrack.models.report_template import ReportTemplate

__all__ = [
    "Client",
    "Location",
    "Employee",
    "Vehicle",
    "VehicleType",
    "WorkEntry",
    "ReportTemplate",
]
