"""
Quote Value Objects
"""

from typing import Any, ClassVar

from buildops.core.domain.base import ValueObject
from buildops.core.errors import DomainValidationError
from buildops.modules.quote.domain.enums import ServiceCategory

DEFAULT_RESPONSE_TIME = "2-3 business days"


class ServiceType(ValueObject):
    """
    One of the services the company quotes for.

    The catalogue is fixed; constructing a ServiceType with an unknown key
    raises ``DomainValidationError``.
    """

    CATALOGUE: ClassVar[dict[str, dict[str, Any]]] = {
        "concrete-asphalt": {
            "name": "Concrete & Asphalt Repairs",
            "category": ServiceCategory.CONSTRUCTION,
            "description": "Professional concrete and asphalt repair services",
            "response_time": "2-3 business days",
        },
        "landscaping": {
            "name": "Landscaping",
            "category": ServiceCategory.MAINTENANCE,
            "description": "Landscape design and maintenance services",
            "response_time": "3-5 business days",
        },
        "painting": {
            "name": "Painting",
            "category": ServiceCategory.CONSTRUCTION,
            "description": "Interior and exterior painting services",
            "response_time": "1-2 business days",
        },
        "demolition": {
            "name": "Demolition",
            "category": ServiceCategory.CONSTRUCTION,
            "description": "Safe demolition and removal services",
            "response_time": "5-7 business days",
        },
        "snow-ice-removal": {
            "name": "Snow & Ice Removal",
            "category": ServiceCategory.SEASONAL,
            "description": "Commercial snow and ice removal services",
            "response_time": "24-48 hours",
        },
    }

    def __init__(self, key: str):
        super().__init__()
        if not isinstance(key, str) or key not in self.CATALOGUE:
            raise DomainValidationError(
                "service_type",
                f"Invalid service type: {key}. Valid types: {', '.join(self.CATALOGUE)}",
            )

        entry = self.CATALOGUE[key]
        self.key = key
        self.name = entry["name"]
        self.category = entry["category"]
        self.description = entry["description"]
        self._freeze()

    @property
    def estimated_response_time(self) -> str:
        return self.CATALOGUE[self.key].get("response_time", DEFAULT_RESPONSE_TIME)

    @classmethod
    def all_keys(cls) -> list[str]:
        return list(cls.CATALOGUE)

    @classmethod
    def all(cls) -> list["ServiceType"]:
        return [cls(key) for key in cls.CATALOGUE]

    @classmethod
    def by_category(cls, category: ServiceCategory) -> list["ServiceType"]:
        return [
            cls(key) for key, entry in cls.CATALOGUE.items() if entry["category"] == category
        ]

    @classmethod
    def is_valid(cls, key: str) -> bool:
        return key in cls.CATALOGUE

    def __str__(self) -> str:
        return self.key


def estimated_response_time(service_type_key: str) -> str:
    """Typical first-response window for a service type key."""
    entry = ServiceType.CATALOGUE.get(service_type_key)
    return entry["response_time"] if entry else DEFAULT_RESPONSE_TIME


__all__ = ["DEFAULT_RESPONSE_TIME", "ServiceType", "estimated_response_time"]
