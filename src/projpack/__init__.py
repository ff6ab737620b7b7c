"""
projpack - Stage a filtered copy of a project tree and package it as a ZIP archive.
"""

from .domain.entities.exclusion import ExclusionPolicy, ExclusionRules
from .domain.entities.run import RunCounters, RunState
from .application.services.pack_service import PackService
from .application.validation import can_pack, validate_pack_request
from .application.container import get_service_container

__version__ = "0.1.0"

__all__ = [
    "ExclusionPolicy",
    "ExclusionRules",
    "RunCounters",
    "RunState",
    "PackService",
    "can_pack",
    "validate_pack_request",
    "get_service_container",
]
