"""Business logic services."""

from .provinces import Province, ProvinceConfig, ProvinceConfigResolver
from .reference_service import ReferenceNumberAllocator, reference_allocator_from_settings

__all__ = [
    "Province",
    "ProvinceConfig",
    "ProvinceConfigResolver",
    "ReferenceNumberAllocator",
    "reference_allocator_from_settings",
]
