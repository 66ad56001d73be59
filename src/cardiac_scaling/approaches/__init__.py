"""
Scaling approach registry.

This module provides automatic registration of scaling approaches by
introspecting BaseScalingApproach subclasses in the approaches submodules.
"""

from typing import Dict, Type

from .base import BaseScalingApproach

# Import approach modules to register subclasses
from . import allometric, ratiometric


def _build_registry() -> Dict[str, Type[BaseScalingApproach]]:
    """Build the registry by discovering BaseScalingApproach subclasses."""
    registry = {}
    for cls in BaseScalingApproach.__subclasses__():
        # Derive approach name from class name: RatiometricApproach -> 'ratiometric'
        approach_name = cls.__name__.replace("Approach", "").lower()
        registry[approach_name] = cls
    return registry


# Global registry instance
registry = _build_registry()


def get_approach(name: str) -> BaseScalingApproach:
    """
    Instantiate a registered approach.

    Raises:
        KeyError: If no approach is registered under the name.
    """
    try:
        return registry[name]()
    except KeyError:
        raise KeyError(
            f"Unsupported scaling approach '{name}'. Available: {sorted(registry)}"
        ) from None


__all__ = ["registry", "get_approach", "BaseScalingApproach", "allometric", "ratiometric"]
