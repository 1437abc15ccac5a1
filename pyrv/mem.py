from pyrv.util import MASK_32, PyVObj
from pyrv.log import logger
from pyrv.clocked import Clocked
from pyrv.isa import InstructionFetchError


def word_index(addr: int) -> int:
    """Maps a byte address to a word index (low 2 bits ignored)."""
    return (MASK_32 & addr) >> 2


class Memory(PyVObj):
    """Simple word-addressed memory.

    A memory is represented by a list of 32 bit words. Byte address `addr`
    selects word `addr >> 2`; the two lowest address bits are ignored.
    """

    def __init__(self, words: list[int]):
        """Memory constructor.

        Args:
            words: Backing list of words. The memory keeps a reference to it,
                so the owner of the list sees every committed write.
        """
        super().__init__(name='UnnamedMemory')
        self.mem = words
        """Memory array."""

    @property
    def size(self) -> int:
        """Capacity in bytes."""
        return 4 * len(self.mem)

    def in_range(self, addr: int) -> bool:
        return word_index(addr) < len(self.mem)

    def load(self, words, offset: int = 0):
        """Copies `words` into the memory, starting at word `offset`.

        Raises:
            ValueError: The words do not fit into the memory.
        """
        words = list(words)
        if offset + len(words) > len(self.mem):
            raise ValueError(
                f"ERROR (Memory ({self.name}), load): {len(words)} words do not fit into {self.size} bytes")  # noqa: E501
        for i, w in enumerate(words):
            self.mem[offset + i] = MASK_32 & w

    def clear(self):
        for i in range(len(self.mem)):
            self.mem[i] = 0


class InstructionMemory(Memory):
    """Read-only instruction memory.

    Fetching outside of the memory is fatal: there is no sensible value to
    execute.
    """

    def __init__(self, size: int = 8 * 1024):
        """Create a new instruction memory.

        Args:
            size: Size of memory in bytes.
        """
        super().__init__([0 for i in range(0, size // 4)])
        self.name = 'UnnamedInstructionMemory'

    def read(self, addr: int) -> int:
        """Fetches the instruction word at byte address `addr`.

        Raises:
            InstructionFetchError: `addr` lies beyond the memory capacity.
        """
        if not self.in_range(addr):
            raise InstructionFetchError(addr, self.size)
        return self.mem[word_index(addr)]


class DataMemory(Memory, Clocked):
    """Data memory with one read port and one write port.

    Reads are combinational. Writes are staged with `write_request()` and
    committed on the next clock tick. Accesses outside of the memory never
    fail: reads return 0, writes are dropped.
    """

    def __init__(self, words: list[int]):
        super().__init__(words)
        self.name = 'UnnamedDataMemory'
        self.we = False
        """Write enable."""
        self._addr = 0
        self._wdata = 0
        self._we_next = False
        self._addr_next = 0
        self._wdata_next = 0

    def read(self, addr: int, re: bool = True) -> int:
        """Reads the word at byte address `addr`.

        Args:
            addr: Byte address.
            re: Read-enable. A disabled read returns 0.

        Returns:
            The word, or 0 if disabled or out of range.
        """
        if not re:
            return 0
        if not self.in_range(addr):
            logger.debug(f"MEM ({self.name}): read from 0x{addr:08X} out of range, returning 0")  # noqa: E501
            return 0

        val = self.mem[word_index(addr)]
        logger.debug(f"MEM ({self.name}): read value {val:08X} from address {addr:08X}")  # noqa: E501
        return val

    def write_request(self, addr: int, wdata: int, we: bool = True):
        """Stages a word write. It is committed with the next _tick().

        Args:
            addr: Byte address.
            wdata: Word to write.
            we: Write-enable. A disabled request is ignored.
        """
        self.we = we
        self._addr = addr
        self._wdata = MASK_32 & wdata

    def _prepare_next_val(self):
        self._we_next = self.we
        self._addr_next = self._addr
        self._wdata_next = self._wdata

    def _tick(self):
        we = self._we_next
        addr = self._addr_next
        wdata = self._wdata_next
        self.we = False
        self._we_next = False

        if not we:
            return

        if not self.in_range(addr):
            logger.debug(f"MEM ({self.name}): write to 0x{addr:08X} out of range dropped")  # noqa: E501
            return

        logger.debug(
            f"MEM {self.name}: write {wdata:08X} to address {addr:08X}")
        self.mem[word_index(addr)] = wdata

    def _reset(self):
        """Reset the write port.

        The contents are left alone: memory gets loaded with data *before*
        the simulation starts.
        """
        self.we = False
        self._we_next = False
