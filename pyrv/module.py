from pyrv.util import PyVObj


class Module(PyVObj):
    """Base class for Modules.

    All combinational units (stages, branch unit) inherit from this class.
    A module gets its inputs as arguments of `process()` and returns its
    outputs; it never keeps a reference to another module.
    """

    def __init__(self, name='UnnamedModule'):
        super().__init__(name)

    def process(self, *args):
        raise NotImplementedError(
            f"ERROR (Module ({self.name})): process() not implemented")
