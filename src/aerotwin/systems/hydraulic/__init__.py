"""Hydraulic systems package.

Provides the single-rod linear actuator model stepped directly by its owner.
"""

from aerotwin.systems.hydraulic.actuator import HydraulicActuator, HydraulicActuatorConfig

__all__ = ["HydraulicActuator", "HydraulicActuatorConfig"]
