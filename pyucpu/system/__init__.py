"""System assembly for the uCPU model."""

from .machine import Machine, MachineConfig, create_machine

__all__ = ["Machine", "MachineConfig", "create_machine"]
