from dataclasses import dataclass, field
from enum import Enum

from pyrv.control import (
    CONTROL_TABLE, ALUOp, ALUSrc, ControlBundle, ImmSel, WBSel,
    decode_control)
from pyrv.mem import DataMemory, InstructionMemory
from pyrv.module import Module
from pyrv.reg import Regfile
import pyrv.isa as isa
from pyrv.util import get_bit, get_bits, MASK_32, XLEN, msb_32, signext
from pyrv.log import logger


class ALUFunc(Enum):
    """Concrete ALU operations."""
    ADD = 0
    SUB = 1
    AND = 2
    OR = 3
    XOR = 4
    SLT = 5
    SLTU = 6
    SLL = 7
    SRL = 8
    SRA = 9


@dataclass
class Fields:
    opcode: int = 0
    rd: int = 0
    funct3: int = 0
    rs1: int = 0
    rs2: int = 0
    funct7: int = 0


@dataclass
class Immediates:
    imm_i: int = 0
    imm_s: int = 0
    imm_b: int = 0
    imm_u: int = 0
    imm_j: int = 0

    def select(self, sel: ImmSel) -> int:
        return {
            ImmSel.I: self.imm_i,
            ImmSel.S: self.imm_s,
            ImmSel.B: self.imm_b,
            ImmSel.U: self.imm_u,
            ImmSel.J: self.imm_j,
        }[sel]


@dataclass
class AluOutcome:
    result: int = 0
    carry: bool = False
    overflow: bool = False
    zero: bool = True
    negative: bool = False


@dataclass
class IFID_t:
    inst: int = 0
    pc: int = 0


@dataclass
class IDEX_t:
    pc: int = 0
    fields: Fields = field(default_factory=Fields)
    imm: Immediates = field(default_factory=Immediates)
    ctrl: ControlBundle = field(default_factory=ControlBundle)
    rs1: int = 0
    rs2: int = 0


@dataclass
class EXMEM_t:
    pc: int = 0
    fields: Fields = field(default_factory=Fields)
    imm: Immediates = field(default_factory=Immediates)
    ctrl: ControlBundle = field(default_factory=ControlBundle)
    rs1: int = 0
    rs2: int = 0
    alu: AluOutcome = field(default_factory=AluOutcome)
    take_branch: bool = False


@dataclass
class MEMWB_t:
    pc: int = 0
    rd: int = 0
    we: bool = False
    wb_sel: WBSel = WBSel.ALU
    alu_res: int = 0
    mem_rdata: int = 0
    imm_u: int = 0
    mem_we: bool = False
    mem_addr: int = 0
    mem_wdata: int = 0


class IFStage(Module):
    """Instruction Fetch Stage.

    Inputs:
        pc: Current program counter (PC).

    Outputs:
        IFID_t: Interface to IDStage.
    """

    def __init__(self, imem: InstructionMemory):
        super().__init__()
        self.imem = imem

    def process(self, pc: int) -> IFID_t:
        inst = self.imem.read(pc)
        logger.debug(f"Fetched 0x{inst:08X} @ PC = 0x{pc:08X}")
        return IFID_t(inst, pc)


class IDStage(Module):
    """Instruction decode stage.

    Inputs:
        IFID_t: Interface from IFStage

    Outputs:
        IDEX_t: Interface to EXStage
    """

    def __init__(self, regf: Regfile):
        super().__init__()
        self.regfile = regf

    def process(self, val: IFID_t) -> IDEX_t:
        inst = val.inst
        f = self.fields(inst)
        imm = self.dec_imm(inst)
        ctrl = self.control(f.opcode)

        if f.opcode not in CONTROL_TABLE:
            logger.debug(f"Unknown opcode 0x{f.opcode:02X} @ PC = 0x{val.pc:08X}: executing as NOP")  # noqa: E501

        # Read regfile
        rs1 = self.regfile.read(f.rs1)
        rs2 = self.regfile.read(f.rs2)

        return IDEX_t(val.pc, f, imm, ctrl, rs1, rs2)

    def fields(self, inst) -> Fields:
        """Splits the instruction word into its fixed-position fields."""
        return Fields(
            opcode=get_bits(inst, 6, 0),
            rd=get_bits(inst, 11, 7),
            funct3=get_bits(inst, 14, 12),
            rs1=get_bits(inst, 19, 15),
            rs2=get_bits(inst, 24, 20),
            funct7=get_bits(inst, 31, 25)
        )

    def control(self, opcode) -> ControlBundle:
        return decode_control(opcode)

    def dec_imm(self, inst) -> Immediates:
        """Decodes all immediates from the instruction word.

        Every format is decoded regardless of the opcode; the control bundle
        decides which one is used.

        Args:
            inst: Current instruction word.

        Returns:
            The sign-extended I/S/B/U/J immediates.
        """

        # I-type
        imm_i = signext(get_bits(inst, 31, 20), 12)

        # S-type
        imm_11_5 = get_bits(inst, 31, 25)
        imm_4_0 = get_bits(inst, 11, 7)
        imm_s = signext((imm_11_5 << 5) | imm_4_0, 12)

        # B-type
        imm_12 = get_bit(inst, 31)
        imm_11 = get_bit(inst, 7)
        imm_10_5 = get_bits(inst, 30, 25)
        imm_4_1 = get_bits(inst, 11, 8)
        imm_b = signext(
            (imm_12 << 12)
            | (imm_11 << 11)
            | (imm_10_5 << 5)
            | (imm_4_1 << 1), 13)

        # U-type
        imm_u = get_bits(inst, 31, 12) << 12

        # J-type
        imm_20 = get_bit(inst, 31)
        imm_19_12 = get_bits(inst, 19, 12)
        imm_11 = get_bit(inst, 20)
        imm_10_1 = get_bits(inst, 30, 21)
        imm_j = signext(
            (imm_20 << 20)
            | (imm_19_12 << 12)
            | (imm_11 << 11)
            | (imm_10_1 << 1), 21)

        return Immediates(imm_i, imm_s, imm_b, imm_u, imm_j)


class EXStage(Module):
    """Execute stage.

    Inputs:
        IDEX_t: Interface from IDStage.

    Outputs:
        EXMEM_t: Interface to MEMStage.
    """

    def process(self, val: IDEX_t) -> EXMEM_t:
        ctrl = val.ctrl
        f = val.fields

        # Select operands
        op1 = val.pc if ctrl.alu_a_is_pc else val.rs1
        if ctrl.alu_src == ALUSrc.IMM:
            op2 = val.imm.select(ctrl.imm_sel)
        else:
            op2 = val.rs2

        func = self.alu_control(ctrl.alu_op, f.funct3, f.funct7)
        alu = self.alu(op1, op2, func)

        take_branch = False
        if ctrl.branch:
            take_branch = self.branch(f.funct3, val.rs1, val.rs2)

        return EXMEM_t(
            val.pc, f, val.imm, ctrl, val.rs1, val.rs2, alu, take_branch)

    def alu_control(self, alu_op: ALUOp, f3: int, f7: int) -> ALUFunc:
        """Refines the coarse ALU operation class into a concrete operation.

        Args:
            alu_op: Operation class from the main decoder.
            f3: funct3 field.
            f7: funct7 field.

        Returns:
            The concrete ALU operation.
        """
        if alu_op == ALUOp.BRANCH_SUB:
            return ALUFunc.SUB
        if alu_op not in (ALUOp.RTYPE, ALUOp.ITYPE):
            return ALUFunc.ADD

        alt = f7 & isa.F7_ALT

        if f3 == isa.ALU_F3['ADD']:
            # For OP-IMM, bit 30 belongs to the immediate: ADDI never
            # subtracts.
            if alu_op == ALUOp.RTYPE and alt:
                return ALUFunc.SUB
            return ALUFunc.ADD
        elif f3 == isa.ALU_F3['SR']:
            return ALUFunc.SRA if alt else ALUFunc.SRL
        elif f3 == isa.ALU_F3['SLL']:
            return ALUFunc.SLL
        elif f3 == isa.ALU_F3['SLT']:
            return ALUFunc.SLT
        elif f3 == isa.ALU_F3['SLTU']:
            return ALUFunc.SLTU
        elif f3 == isa.ALU_F3['XOR']:
            return ALUFunc.XOR
        elif f3 == isa.ALU_F3['OR']:
            return ALUFunc.OR
        elif f3 == isa.ALU_F3['AND']:
            return ALUFunc.AND
        return ALUFunc.ADD

    def alu(self, op1: int, op2: int, func: ALUFunc) -> AluOutcome:
        """Implements arithmetic-logic unit (ALU)

        Args:
            op1: Operand A (rs1 or PC).
            op2: Operand B (rs2 or immediate).
            func: Concrete operation.

        Returns:
            Result and flags. Carry and overflow are only computed for
            ADD and SUB.
        """

        # Helpers
        def _slt(val1, val2):
            """ SLT[I] instruction

            Returns:
                1 if val1 < val2 (signed comparison)
                0 otherwise
            """

            msb_r = msb_32(val1)
            msb_i = msb_32(val2)

            # Same sign: unsigned compare gives the right answer
            if msb_r == msb_i:
                return 1 if val1 < val2 else 0
            # Different signs: val1 is smaller iff it is the negative one
            return msb_r

        def _sra(val1, val2):
            """ SRA[I] instruction

            Returns:
                Arithmetic right shift of val1 by val2 (5 bits)
            """

            shamt = 0x1f & val2
            rshift = (MASK_32 & (val1 >> shamt))
            if msb_32(val1) == 0:
                return rshift
            else:
                # Fill upper bits with 1s
                return (MASK_32 & (rshift | (MASK_32 << (XLEN - shamt))))

        op1 &= MASK_32
        op2 &= MASK_32
        carry = overflow = False

        if func == ALUFunc.ADD:
            wide = op1 + op2
            res = MASK_32 & wide
            carry = bool(get_bit(wide, 32))
            overflow = (msb_32(op1) == msb_32(op2)
                        and msb_32(res) != msb_32(op1))
        elif func == ALUFunc.SUB:
            # A + ~B + 1: carry out is set when no borrow occurs
            wide = op1 + (MASK_32 & ~op2) + 1
            res = MASK_32 & wide
            carry = bool(get_bit(wide, 32))
            overflow = (msb_32(op1) != msb_32(op2)
                        and msb_32(res) != msb_32(op1))
        elif func == ALUFunc.AND:
            res = op1 & op2
        elif func == ALUFunc.OR:
            res = op1 | op2
        elif func == ALUFunc.XOR:
            res = op1 ^ op2
        elif func == ALUFunc.SLT:
            res = _slt(op1, op2)
        elif func == ALUFunc.SLTU:
            res = 1 if op1 < op2 else 0
        elif func == ALUFunc.SLL:
            # Mask so that bits above bit 31 turn to zero (for Python)
            res = MASK_32 & (op1 << (0x1f & op2))
        elif func == ALUFunc.SRL:
            res = op1 >> (0x1f & op2)
        elif func == ALUFunc.SRA:
            res = _sra(op1, op2)
        else:
            logger.debug(f"Unknown ALU operation {func}: result 0")
            res = 0

        return AluOutcome(
            result=res,
            carry=carry,
            overflow=overflow,
            zero=(res == 0),
            negative=bool(msb_32(res))
        )

    def branch(self, f3, rs1, rs2) -> bool:
        """Performs comparison of rs1 and rs2 using comp op given by f3.

        Returns:
            True if branch is taken. An invalid f3 never branches.
        """

        # Branch less-than (BLT) logic
        def _blt(rs1, rs2):
            if msb_32(rs1) == msb_32(rs2):
                return rs1 < rs2
            elif msb_32(rs1) == 1:
                return True
            else:
                return False

        if f3 == isa.BRANCH_F3['BEQ']:
            return rs1 == rs2
        elif f3 == isa.BRANCH_F3['BNE']:
            return rs1 != rs2
        elif f3 == isa.BRANCH_F3['BLT']:
            return _blt(rs1, rs2)
        elif f3 == isa.BRANCH_F3['BGE']:
            return not _blt(rs1, rs2)
        elif f3 == isa.BRANCH_F3['BLTU']:
            return rs1 < rs2
        elif f3 == isa.BRANCH_F3['BGEU']:
            return rs1 >= rs2
        return False


class MEMStage(Module):
    """Memory stage.

    Loads are served from the pre-step contents of the data memory. Stores
    are not performed here: the stage only computes the word to store, which
    the core hands to the data memory at commit.

    Inputs:
        EXMEM_t: Interface from EXStage.

    Outputs:
        MEMWB_t: Interface to WBStage.
    """

    def __init__(self, dmem: DataMemory):
        super().__init__()
        self.dmem = dmem

    def process(self, in_val: EXMEM_t) -> MEMWB_t:
        ctrl = in_val.ctrl
        f3 = in_val.fields.funct3
        addr = in_val.alu.result

        mem_rdata = 0
        mem_wdata = 0
        if ctrl.mem_read:
            self.check_alignment("load from", addr, f3)
            word = self.dmem.read(addr, True)
            mem_rdata = self.load_val(word, addr, f3)
        elif ctrl.mem_write:
            self.check_alignment("store to", addr, f3)
            old = 0
            if f3 in (isa.STORE_F3['SB'], isa.STORE_F3['SH']):
                old = self.dmem.read(addr, True)
            mem_wdata = self.store_val(old, in_val.rs2, addr, f3)

        return MEMWB_t(
            pc=in_val.pc,
            rd=in_val.fields.rd,
            we=ctrl.reg_write,
            wb_sel=ctrl.wb_sel,
            alu_res=in_val.alu.result,
            mem_rdata=mem_rdata,
            imm_u=in_val.imm.imm_u,
            mem_we=ctrl.mem_write,
            mem_addr=addr,
            mem_wdata=mem_wdata
        )

    def load_val(self, word, addr, f3) -> int:
        """Extracts the loaded value from the addressed word.

        Unknown f3 values load the whole word.
        """
        byte = get_bits(word, 8 * (addr & 3) + 7, 8 * (addr & 3))
        half = get_bits(word, 8 * (addr & 2) + 15, 8 * (addr & 2))

        if f3 == isa.LOAD_F3['LB']:
            return signext(byte, 8)
        elif f3 == isa.LOAD_F3['LH']:
            return signext(half, 16)
        elif f3 == isa.LOAD_F3['LBU']:
            return byte
        elif f3 == isa.LOAD_F3['LHU']:
            return half
        return word

    def store_val(self, old, wdata, addr, f3) -> int:
        """Merges the store data into the addressed word.

        Unknown f3 values store the whole word.
        """
        if f3 == isa.STORE_F3['SB']:
            shift = 8 * (addr & 3)
            mask = 0xff << shift
        elif f3 == isa.STORE_F3['SH']:
            shift = 8 * (addr & 2)
            mask = 0xffff << shift
        else:
            return MASK_32 & wdata

        return (old & ~mask & MASK_32) | ((wdata << shift) & mask)

    def check_alignment(self, op_str, addr, f3):
        # Not trapped: word accesses ignore the low bits, halfword accesses
        # ignore bit 0.
        if f3 in (isa.LOAD_F3['LB'], isa.LOAD_F3['LBU']):
            return

        if f3 in (isa.LOAD_F3['LH'], isa.LOAD_F3['LHU']):
            if addr & 0x1 != 0:
                logger.debug(f"Misaligned {op_str} address 0x{addr:08X}.")
        elif addr & 0x3 != 0:
            logger.debug(f"Misaligned {op_str} address 0x{addr:08X}.")


class WBStage(Module):
    """Write-back stage.

    Inputs:
        MEMWB_t: Interface from MEMStage.
        pc4: PC + 4 from the branch unit.

    Outputs:
        (we, rd, wb_val) for the register file write port.
    """

    def process(self, in_val: MEMWB_t, pc4: int):
        wb_val = self.select(in_val.wb_sel, in_val.alu_res, in_val.mem_rdata,
                             pc4, in_val.imm_u, in_val.pc)
        return in_val.we, in_val.rd, wb_val

    def select(self, wb_sel, alu_res, mem_rdata, pc4, imm_u, pc) -> int:
        """Picks the value to write into the register file.

        Returns:
            The selected value, or 0 for an unknown `wb_sel`.
        """
        if wb_sel == WBSel.ALU:
            return alu_res
        elif wb_sel == WBSel.MEM:
            return mem_rdata
        elif wb_sel == WBSel.PC4:
            return pc4
        elif wb_sel == WBSel.UIMM:
            return imm_u
        elif wb_sel == WBSel.PC_IMM:
            return MASK_32 & (pc + imm_u)
        return 0


class BranchUnit(Module):
    """Branch unit.

    Computes the next PC. Priority, highest first:
    JALR target, JAL target, taken branch target, PC + 4.

    Inputs:
        EXMEM_t: Interface from EXStage.

    Outputs:
        (npc, pc4): Next PC and PC + 4.
    """

    def process(self, val: EXMEM_t):
        ctrl = val.ctrl
        return self.next_pc(
            val.pc, val.rs1, val.imm,
            ctrl.jalr, ctrl.jump, ctrl.branch, val.take_branch)

    def next_pc(self, pc, rs1, imm: Immediates, jalr, jump, branch,
                take_branch):
        pc4 = MASK_32 & (pc + 4)

        if jalr:
            npc = 0xfffffffe & (rs1 + imm.imm_i)
        elif jump:
            npc = MASK_32 & (pc + imm.imm_j)
        elif branch and take_branch:
            npc = MASK_32 & (pc + imm.imm_b)
        else:
            npc = pc4

        return npc, pc4
