from pyrv.log import logger
from pyrv.module import Module
from pyrv.simulator import Simulator
from pyrv.state import StepResult


class Model:
    """Base class for all core models.
    """
    def __init__(self):
        logger.info("Initializing model...")

        self.sim = Simulator(self.top)
        """Simulator instance"""

        self.sim.init()

    def setTop(self, mod: Module, name: str):
        """Set top module.

        Args:
            mod (Module): Designated top module.
            name (str): The name the top module should have.
        """

        # Set name of module
        mod.name = name
        self.top = mod

    def step(self) -> StepResult:
        """Executes a single instruction.

        Returns:
            StepResult: Outcome of the step.
        """
        return self.sim.step()

    def run(self, num_cycles=1):
        """Runs the simulation.

        Args:
            num_cycles (int, optional): Number of clock cycles to simulate.
        """
        self.sim.run(num_cycles)

    def get_cycles(self):
        """Get number cycles executed.

        Returns:
            int: Number of executed cycles.
        """
        return self.sim.get_cycles()
