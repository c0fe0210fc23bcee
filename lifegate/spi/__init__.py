"""SPI surface for lifegate extensions."""

from .contributor import ConditionContributor

__all__ = [
    "ConditionContributor",
]
