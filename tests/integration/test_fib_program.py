"""Assembles and runs the Fibonacci sample end to end."""

from pathlib import Path

from pyucpu.cpu import disassemble
from pyucpu.loader import assemble_from_path, format_hex, parse_hex
from pyucpu.system import MachineConfig, create_machine

PROGRAM = Path(__file__).resolve().parents[2] / "programs" / "fib.uca"

FIB_WORDS = [
    0xD00, 0xEF8, 0xE10, 0xD01, 0xE11, 0xC10, 0xEFC, 0x411,
    0x80A, 0xB09, 0xE12, 0xC11, 0xE10, 0xC12, 0xE11, 0xB05,
]


def test_fib_assembles() -> None:
    image = assemble_from_path(PROGRAM)

    assert image.name == "fib"
    assert image.ok
    assert image.warnings == []
    assert image.words[:16] == FIB_WORDS
    assert disassemble(image.words[6]) == "STA @IX+"
    assert parse_hex(format_hex(image.words).splitlines()) == image.words


def test_fib_runs_to_completion() -> None:
    image = assemble_from_path(PROGRAM)
    machine = create_machine(MachineConfig(rom_image=image.words))

    machine.run(400)

    ram = machine.ram.snapshot()
    assert list(ram[:13]) == [0, 1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89, 144]
    assert ram[13] == 0
    assert machine.state.ix == 13
    assert machine.state.cf
    # parked on "$3 JMP $3"
    assert machine.state.ir in (0xB09, 0xE12)
    before = machine.ram.snapshot()
    machine.run(50)
    assert machine.ram.snapshot() == before
