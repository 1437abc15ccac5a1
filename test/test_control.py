from dataclasses import FrozenInstanceError
import pytest
from pyrv.control import (
    ALUOp, ALUSrc, ControlBundle, ImmSel, NOP_CONTROL, WBSel, decode_control)
from pyrv.isa import OPCODES


def test_nop_control():
    ctrl = NOP_CONTROL
    assert ctrl == ControlBundle()
    assert not ctrl.reg_write
    assert not ctrl.mem_read
    assert not ctrl.mem_write
    assert not ctrl.branch
    assert not ctrl.jump
    assert not ctrl.jalr


@pytest.mark.parametrize("opcode", [0x00, 0x0F, 0x73, 0x7F, 0x1F, 0x13 ^ 0x3])
def test_unknown_opcode(opcode):
    assert decode_control(opcode) is NOP_CONTROL


# opcode: (alu_op, alu_src, imm_sel, mem_read, mem_write, reg_write, wb_sel,
#          branch, jump, jalr, alu_a_is_pc)
TABLE = {
    "OP": (ALUOp.RTYPE, ALUSrc.REG, ImmSel.I, False, False, True, WBSel.ALU,
           False, False, False, False),
    "OP-IMM": (ALUOp.ITYPE, ALUSrc.IMM, ImmSel.I, False, False, True,
               WBSel.ALU, False, False, False, False),
    "LOAD": (ALUOp.ADD, ALUSrc.IMM, ImmSel.I, True, False, True, WBSel.MEM,
             False, False, False, False),
    "STORE": (ALUOp.ADD, ALUSrc.IMM, ImmSel.S, False, True, False, WBSel.ALU,
              False, False, False, False),
    "BRANCH": (ALUOp.BRANCH_SUB, ALUSrc.REG, ImmSel.B, False, False, False,
               WBSel.ALU, True, False, False, False),
    "JAL": (ALUOp.ADD, ALUSrc.IMM, ImmSel.J, False, False, True, WBSel.PC4,
            False, True, False, True),
    "JALR": (ALUOp.ADD, ALUSrc.IMM, ImmSel.I, False, False, True, WBSel.PC4,
             False, False, True, False),
    "LUI": (ALUOp.ADD, ALUSrc.IMM, ImmSel.U, False, False, True, WBSel.UIMM,
            False, False, False, False),
    "AUIPC": (ALUOp.ADD, ALUSrc.IMM, ImmSel.U, False, False, True,
              WBSel.PC_IMM, False, False, False, True),
}


@pytest.mark.parametrize("name", TABLE.keys())
def test_control_table(name):
    ctrl = decode_control(OPCODES[name])
    got = (ctrl.alu_op, ctrl.alu_src, ctrl.imm_sel, ctrl.mem_read,
           ctrl.mem_write, ctrl.reg_write, ctrl.wb_sel, ctrl.branch,
           ctrl.jump, ctrl.jalr, ctrl.alu_a_is_pc)
    assert got == TABLE[name]


def test_plain_int_opcode():
    assert decode_control(0x33).alu_op == ALUOp.RTYPE
    assert decode_control(0x6F).jump


def test_control_bundle_frozen():
    with pytest.raises(FrozenInstanceError):
        NOP_CONTROL.reg_write = True



@pytest.mark.parametrize("name", TABLE.keys())
def test_known_opcodes(name):
    assert decode_control(OPCODES[name]) is not NOP_CONTROL
