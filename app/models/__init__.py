"""
Database Models
"""

from app.models.client import Client
from app.models.service import Service, project_services, vendor_services
from app.models.project import Project, ProjectStatus
from app.models.vendor import Vendor, VendorCountry
from app.models.match import Match

__all__ = [
    "Client",
    "Service",
    "project_services",
    "vendor_services",
    "Project",
    "ProjectStatus",
    "Vendor",
    "VendorCountry",
    "Match",
]
