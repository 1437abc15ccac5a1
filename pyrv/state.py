from dataclasses import dataclass, field

from pyrv.isa import NUM_REGS


@dataclass
class MachineState:
    """Architectural state of one core.

    This is everything that survives a step. The register file, the data
    memory and the PC register of a core all hold references into one
    instance of this class.
    """
    pc: int = 0
    registers: list[int] = field(default_factory=lambda: [0] * NUM_REGS)
    data_memory: list[int] = field(default_factory=list)

    @classmethod
    def create(cls, dmem_size: int) -> 'MachineState':
        """Creates a zeroed state with a data memory of `dmem_size` bytes."""
        return cls(data_memory=[0] * (dmem_size // 4))


@dataclass(frozen=True)
class StepResult:
    halted: bool
    """The step did not change the state: every further step is a no-op."""
    pc: int = 0
    """PC of the executed instruction."""
    next_pc: int = 0
    inst: int = 0
