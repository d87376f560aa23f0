"""Cycle-accurate model of the uCPU pipelined 8-bit accumulator machine.

``cpu`` holds the three-stage core, ``bus`` the instruction and data
memories, ``loader`` the assembler and hex image format, ``system`` the
machine assembly used by ``run.py`` and ``utils`` debug logging and tracing.
"""

from __future__ import annotations

from . import bus, cpu, loader, system, utils

__all__: list[str] = [
    "bus",
    "cpu",
    "loader",
    "system",
    "utils",
]
