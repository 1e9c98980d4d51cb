"""Utility entry points for inspecting clip plans."""

from .plan_map import create_plan_map

__all__ = ["create_plan_map"]
