"""CPU package for the uCPU model."""

from .core import UCPU, CPUError, CoreState, MemoryWrite, TickResult, tick
from .bubble import SkipState
from .decoder import ControlWord, Instruction, NOP_CONTROL, decode, disassemble
from . import addressing, alu, bypass, decoder

__all__ = [
    "UCPU",
    "CoreState",
    "CPUError",
    "ControlWord",
    "Instruction",
    "MemoryWrite",
    "NOP_CONTROL",
    "SkipState",
    "TickResult",
    "addressing",
    "alu",
    "bypass",
    "decode",
    "decoder",
    "disassemble",
    "tick",
]
