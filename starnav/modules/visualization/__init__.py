"""Webcam preview overlay."""
from .dashboard import Dashboard, DashboardConfig, describe_gesture, describe_selection

__all__ = ["Dashboard", "DashboardConfig", "describe_gesture", "describe_selection"]
