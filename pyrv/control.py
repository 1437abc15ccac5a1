"""Control signals and the main decoder table."""

from dataclasses import dataclass
from enum import Enum

from pyrv.isa import Opcode


class WBSel(Enum):
    """What to write back into the register file."""
    ALU = 0
    MEM = 1
    PC4 = 2      # Link address (JAL, JALR)
    UIMM = 3     # LUI
    PC_IMM = 4   # AUIPC


class ALUSrc(Enum):
    """Source of ALU operand B."""
    REG = 0
    IMM = 1


class ImmSel(Enum):
    """Which immediate feeds ALU operand B."""
    I = 0  # noqa: E741
    S = 1
    B = 2
    U = 3
    J = 4


class ALUOp(Enum):
    """Coarse ALU operation class, refined by the ALU control."""
    ADD = 0
    BRANCH_SUB = 1
    RTYPE = 2
    ITYPE = 3


@dataclass(frozen=True)
class ControlBundle:
    reg_write: bool = False
    wb_sel: WBSel = WBSel.ALU
    alu_src: ALUSrc = ALUSrc.REG
    imm_sel: ImmSel = ImmSel.I
    alu_op: ALUOp = ALUOp.ADD
    alu_a_is_pc: bool = False
    mem_read: bool = False
    mem_write: bool = False
    branch: bool = False
    jump: bool = False
    jalr: bool = False


# Unknown opcodes execute as a NOP: nothing is written, PC advances by 4.
NOP_CONTROL = ControlBundle()

CONTROL_TABLE = {
    Opcode.OP: ControlBundle(
        reg_write=True, wb_sel=WBSel.ALU, alu_src=ALUSrc.REG,
        alu_op=ALUOp.RTYPE),
    Opcode.OP_IMM: ControlBundle(
        reg_write=True, wb_sel=WBSel.ALU, alu_src=ALUSrc.IMM,
        imm_sel=ImmSel.I, alu_op=ALUOp.ITYPE),
    Opcode.LOAD: ControlBundle(
        reg_write=True, wb_sel=WBSel.MEM, alu_src=ALUSrc.IMM,
        imm_sel=ImmSel.I, alu_op=ALUOp.ADD, mem_read=True),
    Opcode.STORE: ControlBundle(
        reg_write=False, alu_src=ALUSrc.IMM, imm_sel=ImmSel.S,
        alu_op=ALUOp.ADD, mem_write=True),
    Opcode.BRANCH: ControlBundle(
        alu_src=ALUSrc.REG, imm_sel=ImmSel.B, alu_op=ALUOp.BRANCH_SUB,
        branch=True),
    Opcode.JAL: ControlBundle(
        reg_write=True, wb_sel=WBSel.PC4, alu_src=ALUSrc.IMM,
        imm_sel=ImmSel.J, alu_op=ALUOp.ADD, alu_a_is_pc=True, jump=True),
    Opcode.JALR: ControlBundle(
        reg_write=True, wb_sel=WBSel.PC4, alu_src=ALUSrc.IMM,
        imm_sel=ImmSel.I, alu_op=ALUOp.ADD, jalr=True),
    Opcode.LUI: ControlBundle(
        reg_write=True, wb_sel=WBSel.UIMM, alu_src=ALUSrc.IMM,
        imm_sel=ImmSel.U, alu_op=ALUOp.ADD),
    Opcode.AUIPC: ControlBundle(
        reg_write=True, wb_sel=WBSel.PC_IMM, alu_src=ALUSrc.IMM,
        imm_sel=ImmSel.U, alu_op=ALUOp.ADD, alu_a_is_pc=True),
}


def decode_control(opcode: int) -> ControlBundle:
    """Main decoder.

    Args:
        opcode: 7 bit opcode of the current instruction.

    Returns:
        The control bundle for `opcode`, or `NOP_CONTROL` for an opcode
        outside of the RV32I base subset.
    """
    return CONTROL_TABLE.get(opcode, NOP_CONTROL)
