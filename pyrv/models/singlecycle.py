import copy

from pyrv.clocked import Clock
from pyrv.image import parse_hex_image
from pyrv.isa import NUM_REGS
from pyrv.mem import DataMemory, InstructionMemory, word_index
from pyrv.models.model import Model
from pyrv.module import Module
from pyrv.reg import PCReg, Regfile
from pyrv.stages import (
    IFStage, IDStage, EXStage, MEMStage, WBStage, BranchUnit, MEMWB_t)
from pyrv.state import MachineState, StepResult
from pyrv.util import MASK_32


def _check_size(name, size):
    if not isinstance(size, int) or size <= 0 or size % 4 != 0:
        raise ValueError(
            f"{name} must be a positive multiple of 4 bytes, got {size!r}")


class SingleCycle(Module):
    """Implements a simple, single cycle RISC-V CPU (RV32I).

    Every step fetches, decodes, executes and writes back one instruction.
    All stages compute from the state as it was before the step; the
    register write, the data memory write and the PC update are then
    committed together by one clock tick.

    Default memory sizes: 8 KiB instruction memory, 8 KiB data memory.
    """

    def __init__(self, imem_size: int = 8*1024, dmem_size: int = 8*1024):
        super().__init__(name='SingleCycle')
        _check_size("imem_size", imem_size)
        _check_size("dmem_size", dmem_size)

        # Architectural state
        self.state = MachineState.create(dmem_size)
        self.regf = Regfile(self.state.registers)
        self.pc_reg = PCReg(self.state)
        self.imem = InstructionMemory(imem_size)
        self.dmem = DataMemory(self.state.data_memory)

        self.clock = Clock()
        self.clock.add(self.regf)
        self.clock.add(self.dmem)
        self.clock.add(self.pc_reg)

        # Stages/modules
        self.if_stg = IFStage(self.imem)
        self.id_stg = IDStage(self.regf)
        self.ex_stg = EXStage()
        self.mem_stg = MEMStage(self.dmem)
        self.wb_stg = WBStage()
        self.bu = BranchUnit()

    def step(self) -> StepResult:
        """Executes one instruction.

        Raises:
            InstructionFetchError: The PC points outside of the instruction
                memory. Nothing is committed in that case.
        """
        pc = self.pc_reg.read()

        ifid = self.if_stg.process(pc)
        idex = self.id_stg.process(ifid)
        exmem = self.ex_stg.process(idex)
        memwb = self.mem_stg.process(exmem)
        npc, pc4 = self.bu.process(exmem)
        we, rd, wb_val = self.wb_stg.process(memwb, pc4)

        halted = (npc == pc
                  and not self._changes_state(we, rd, wb_val, memwb))

        self._commit(we, rd, wb_val, memwb, npc)

        return StepResult(halted, pc, npc, ifid.inst)

    def _changes_state(self, we, rd, wb_val, memwb: MEMWB_t) -> bool:
        if we and rd != 0 and self.regf.regs[rd] != (MASK_32 & wb_val):
            return True
        if memwb.mem_we and self.dmem.in_range(memwb.mem_addr):
            old = self.dmem.mem[word_index(memwb.mem_addr)]
            if old != memwb.mem_wdata:
                return True
        return False

    def _commit(self, we, rd, wb_val, memwb: MEMWB_t, npc):
        if we:
            self.regf.write_request(rd, wb_val)
        self.dmem.write_request(
            memwb.mem_addr, memwb.mem_wdata, memwb.mem_we)
        self.pc_reg.next = npc

        self.clock.tick()

    def reset(self):
        """Resets registers and PC. Memory contents are kept."""
        self.clock.reset()

    def load(self, image, data=None):
        """Resets the core and loads a program.

        Args:
            image: Iterable of instruction words, placed at address 0.
            data: Optional iterable of words, placed at the start of the data
                memory. The rest of the data memory is zeroed.

        Raises:
            ValueError: The image or the data does not fit.
        """
        image = list(image)
        data = list(data) if data is not None else []
        if 4 * len(image) > self.imem.size:
            raise ValueError(f"Program image ({4 * len(image)} bytes) exceeds instruction memory ({self.imem.size} bytes)")  # noqa: E501
        if 4 * len(data) > self.dmem.size:
            raise ValueError(f"Data image ({4 * len(data)} bytes) exceeds data memory ({self.dmem.size} bytes)")  # noqa: E501

        self.reset()
        self.imem.clear()
        self.imem.load(image)
        self.dmem.clear()
        self.dmem.load(data)


class SingleCycleModel(Model):
    """Model wrapper for SingleCycle.

    `run(num_cycles)` stops at the first fixed point (a step that changes
    nothing), so `get_cycles()` counts the cycles actually executed and can
    be lower than the budget passed to `run()`. The final state is the same
    as after the full budget.
    """

    def __init__(self, imem_size: int = 8*1024, dmem_size: int = 8*1024):
        self.core = SingleCycle(imem_size, dmem_size)
        self.setTop(self.core, 'SingleCycleTop')

        super().__init__()

    def load(self, image, data=None):
        """Load a program into the instruction memory.

        Resets registers, PC and the cycle counter.

        Args:
            image (list): List of instruction words.
            data (list, optional): Initial data memory words.
        """
        self.core.load(image, data)
        self.sim.reset()

    def load_hex(self, lines, data=None):
        """Load a program given in the hex image text format.

        Args:
            lines: Image text, or an iterable of its lines.
            data (list, optional): Initial data memory words.
        """
        self.load(parse_hex_image(lines), data)

    def run(self, num_cycles=1) -> MachineState:
        """Runs at most `num_cycles` cycles.

        Stops early at a fixed point; see `get_cycles()` for the number of
        cycles actually executed.

        Returns:
            MachineState: Snapshot of the state after the run.
        """
        self.sim.run(num_cycles)
        return self.state()

    def state(self) -> MachineState:
        """Returns a snapshot copy of the architectural state."""
        return copy.deepcopy(self.core.state)

    def read_register(self, reg):
        """Read a register in the register file.

        Args:
            reg (int): index of register to be read.

        Returns:
            int: Value of register.
        """
        if not 0 <= reg < NUM_REGS:
            raise ValueError(f"Invalid register index {reg}")
        return self.core.regf.read(reg)

    def read_pc(self):
        """Read current program counter (PC).

        Returns:
            int: current program counter
        """
        return self.core.pc_reg.read()

    def read_memory(self, addr):
        """Read a word from data memory.

        Args:
            addr (int): Byte address (low 2 bits ignored).

        Returns:
            int: The word, or 0 if `addr` is out of range.
        """
        return self.core.dmem.read(addr, True)
