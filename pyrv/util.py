"""Utility stuff."""


class PyVObj:
    """This class represent all Py-RV objects (such as stages, memories,
    registers). Currently, this is used for initializing the names of every
    object in the design, which show up in the log.
    """
    def __init__(self, name="noName") -> None:
        self.name = name
        """Name of this object"""
        self._visited = False

    def _init(self, parent=None):
        """Initializes the object.

        This includes the following steps:
        - Set the name of each child PyVObj instance (a child shared by
          several parents keeps the name of the first one)
        - Recursively call `_init()` for each child `PyVObj` instance
        """
        if self._visited:
            return
        self._visited = True

        for key, obj in self.__dict__.items():
            if isinstance(obj, (PyVObj)) and not obj._visited:
                obj.name = self.name + "." + key
                obj._init(self)


# XLEN
XLEN = 32

# 32 bit mask
MASK_32 = 0xffffffff


def msb_32(val) -> int:
    """Returns the MSB of a 32 bit value."""

    return (val & 0x80000000) >> 31


def get_bit(val, idx: int) -> int:
    """Gets a bit."""

    return (val >> idx) & 1


def get_bits(val, hiIdx: int, loIdx: int) -> int:
    """Returns a bit slice of a value.

    Args:
        val: Original value.
        hiIdx: Upper (high) index of slice.
        loIdx: Lower index of slice.

    Returns:
        The bit slice.
    """

    return (~(MASK_32 << (hiIdx - loIdx + 1)) & (val >> loIdx))


def signext(val, width: int):
    """Sign-extends a value (`val`) of width `width` bits to 32-bits."""

    msb = get_bit(val, width - 1)

    if msb:  # 1
        val = MASK_32 & ((-1) << width | val)

    return val
