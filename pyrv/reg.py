from pyrv.util import MASK_32
from pyrv.clocked import Clocked
from pyrv.log import logger
from pyrv.isa import NUM_REGS


class Regfile(Clocked):
    """RISC-V: Integer register file.

    The register cells live in an externally owned list (the `registers`
    buffer of a `MachineState`), which is mutated only by `_tick()`.
    """

    def __init__(self, regs: list[int]):
        if len(regs) != NUM_REGS:
            raise ValueError(f"Register file needs {NUM_REGS} cells, got {len(regs)}.")  # noqa: E501
        self.regs = regs
        self._next_w_idx = 0
        self._next_w_val = 0
        self.we = False
        """Write enable."""
        self._do_tick = False

    def read(self, reg: int) -> int:
        """Reads a register.

        Args:
            reg (int): Index of register to read.

        Returns:
            int: The value of the register.
        """
        if reg == 0:
            return 0
        else:
            val = self.regs[reg]
            logger.debug(f"Regfile READ: x{reg} = {val}")
            return val

    def write_request(self, reg: int, val: int):
        """Writes a value to a register.

        The write is committed with the next _tick(). A write to x0 is
        dropped here, so it can never be observed.

        Args:
            reg (int): Index of register to write.
            val (int): Value to write.
        """
        if reg != 0:
            self._next_w_idx = reg
            self._next_w_val = MASK_32 & val
            self.we = True

    def _prepare_next_val(self):
        self._do_tick = self.we

    def _tick(self):
        """Register file tick.

        Commits a write request (when `we` is set).
        """
        if not self._do_tick:
            return

        logger.debug(f"Regfile WRITE: x{self._next_w_idx} changed from {self.regs[self._next_w_idx]} to {self._next_w_val}")  # noqa: E501
        self.regs[self._next_w_idx] = self._next_w_val

        self.we = False
        self._do_tick = False

    def _reset(self):
        """Resets the register file."""
        for i in range(len(self.regs)):
            self.regs[i] = 0
        self.we = False
        self._do_tick = False


class PCReg(Clocked):
    """Program counter register.

    Reads and writes the `pc` field of the `MachineState` it is bound to.
    """

    def __init__(self, state, reset_val: int = 0):
        self._state = state
        self._reset_val = reset_val
        self.next = reset_val
        """Next value input"""
        self._nextv = reset_val

    def read(self) -> int:
        """Returns the current PC."""
        return self._state.pc

    def _prepare_next_val(self):
        self._nextv = MASK_32 & self.next

    def _tick(self):
        self._state.pc = self._nextv

    def _reset(self):
        self._state.pc = self._reset_val
        self.next = self._reset_val
