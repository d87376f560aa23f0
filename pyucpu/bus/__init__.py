"""Memory collaborators for the uCPU model."""

from .memory import ADDRESS_SPACE, Addressable, DataMemory, InstructionMemory, MemoryError

__all__ = [
    "ADDRESS_SPACE",
    "Addressable",
    "DataMemory",
    "InstructionMemory",
    "MemoryError",
]
