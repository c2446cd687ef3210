"""
Fixed-width bitfield helper.

This module provides a small immutable accessor over an unsigned integer,
used to inspect GPT partition attribute flags bit by bit.
"""
from slotctl.core.exceptions import BitRangeError

OCTET_WIDTH = 8


class Bitfield:
    """
    Read-only view of an unsigned integer as a fixed number of bits.
    Bit 0 is the least significant bit.
    """
    def __init__(self, value: int, width: int = 64):
        """
        Initialize the bitfield.
        
        Args:
            value: Unsigned integer holding the bits (not range checked)
            width: Number of bits in the field
        """
        if width <= 0:
            raise ValueError(f"Bitfield width must be positive, got {width}")
        self._value = value
        self._width = width

    @property
    def value(self) -> int:
        return self._value

    @property
    def width(self) -> int:
        return self._width

    def get_bit(self, n: int) -> int:
        """
        Return bit n of the field.
        
        Args:
            n: Bit index, 0 being the least significant bit
            
        Returns:
            0 or 1
            
        Raises:
            BitRangeError: If n is outside the field
        """
        if n < 0 or n >= self._width:
            raise BitRangeError(f"Bit {n} reaches outside the width of {self._width} bits.")
        return (self._value >> n) & 1

    def __getitem__(self, n: int) -> int:
        return self.get_bit(n)

    def to_integer(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def format(self, delimiter: str = ":") -> str:
        """
        Render the field in binary, most significant octet first.
        
        Args:
            delimiter: String placed between octets
            
        Returns:
            Zero-padded binary string grouped by octet, e.g. "00000000:01110111"
        """
        digits = format(self._value, "b").rjust(self._width, "0")
        octets = [digits[i:i + OCTET_WIDTH] for i in range(0, len(digits), OCTET_WIDTH)]
        return delimiter.join(octets)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"Bitfield({self._value:#x}, width={self._width})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitfield):
            return NotImplemented
        return self._value == other._value and self._width == other._width

    def __hash__(self) -> int:
        return hash((self._value, self._width))
