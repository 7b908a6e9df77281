"""Quadruped control building blocks: controller states, gait wave and trajectories, motor messages."""

__version__ = "0.1.0"