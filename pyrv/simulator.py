from datetime import datetime

from pyrv.log import logger
from pyrv.state import StepResult


class Simulator:
    """Drives a core cycle by cycle.

    The simulator owns the cycle counter. It never stops by itself: the
    caller's cycle budget decides how long a run lasts. The only shortcut is
    a fixed point (a step that changes nothing), after which further cycles
    cannot change the state.
    """

    def __init__(self, core):
        """
        Args:
            core: The top module. Must provide `step()`, `reset()` and
                `_init()`.
        """
        self._core = core
        self._cycles = 0

    def init(self):
        """Initialize the simulator.

        Names every object in the design. It should be called before running
        the simulation.
        """
        self._core._init()

    def _log_cycle(self):
        logger.info(f"**** Cycle {self._cycles} ****")

    def step(self) -> StepResult:
        """Perform a single simulation step (cycle).

        Returns:
            The result of the executed step.
        """
        self._log_cycle()
        res = self._core.step()
        self._cycles += 1
        return res

    def reset(self):
        """Applies global reset (registers, PC) and clears the cycle counter.
        """
        self._core.reset()
        self._cycles = 0

    def run(self, num_cycles=1) -> int:
        """Runs the simulation.

        Args:
            num_cycles (int, optional): Maximum number of cycles to execute.
                Defaults to 1. The run ends earlier when a step reports a
                fixed point.

        Returns:
            The number of cycles executed so far, which is lower than the
            budget after an early stop.
        """
        current_time = datetime.now().strftime("%A, %b %d, %Y at %H:%M:%S")
        logger.info(f"**** Simulation started on {current_time} ****\n")

        for i in range(0, num_cycles):
            res = self.step()
            if res.halted:
                logger.info(f"Fixed point reached @ PC = 0x{res.pc:08X} after {self._cycles} cycles")  # noqa: E501
                break

        return self._cycles

    def get_cycles(self):
        """Returns the current number of cycles.

        Returns:
            int: The current number of cycles.
        """
        return self._cycles
