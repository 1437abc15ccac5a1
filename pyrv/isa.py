"""ISA definitions.

"""

from enum import IntEnum


# Full 7 bit major opcodes of the RV32I base subset.
class Opcode(IntEnum):
    LOAD = 0x03
    OP_IMM = 0x13
    AUIPC = 0x17
    STORE = 0x23
    OP = 0x33
    LUI = 0x37
    BRANCH = 0x63
    JALR = 0x67
    JAL = 0x6F


OPCODES = {
    "LOAD": Opcode.LOAD,
    "OP-IMM": Opcode.OP_IMM,
    "AUIPC": Opcode.AUIPC,
    "STORE": Opcode.STORE,
    "OP": Opcode.OP,
    "LUI": Opcode.LUI,
    "BRANCH": Opcode.BRANCH,
    "JALR": Opcode.JALR,
    "JAL": Opcode.JAL,
}

# --------------------------------
# funct3 encodings
# --------------------------------

BRANCH_F3 = {
    "BEQ": 0b000,
    "BNE": 0b001,
    "BLT": 0b100,
    "BGE": 0b101,
    "BLTU": 0b110,
    "BGEU": 0b111
}

# OP / OP-IMM
ALU_F3 = {
    "ADD": 0b000,
    "SLL": 0b001,
    "SLT": 0b010,
    "SLTU": 0b011,
    "XOR": 0b100,
    "SR": 0b101,
    "OR": 0b110,
    "AND": 0b111
}

LOAD_F3 = {
    "LB": 0b000,
    "LH": 0b001,
    "LW": 0b010,
    "LBU": 0b100,
    "LHU": 0b101
}

STORE_F3 = {
    "SB": 0b000,
    "SH": 0b001,
    "SW": 0b010
}

# funct7 bit that selects SUB/SRA
F7_ALT = 0b0100000

# --------------------------------
# Registers
# --------------------------------
NUM_REGS = 32


# --------------------------------
# Exceptions
# --------------------------------

class SimulationError(Exception):
    """Base class for fatal simulation errors."""


class InstructionFetchError(SimulationError):
    def __init__(self, pc, capacity):
        msg = f"Instruction fetch @ PC = 0x{pc:08X} outside of instruction memory ({capacity} bytes)"  # noqa: E501
        super().__init__(msg)
        self.pc = pc
