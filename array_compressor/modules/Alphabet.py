from functools import lru_cache

from array_compressor.modules.CodecErrors import MalformedPayload

# Printable ASCII range the symbols are drawn from ('!' .. '}')
FIRST_CODE_POINT = 33
LAST_CODE_POINT = 125

# Symbols needed so that every 6-bit group has a carrier
PACKED_BITS = 6
MIN_ALPHABET_SIZE = 1 << PACKED_BITS


class Alphabet:
    """
    Ordered set of printable symbols used two ways:

    - as digits of a base-B positional numeral system (scalar codec)
    - as carriers of 6-bit groups for bit-packed payloads (first 64 symbols)

    The two reserved delimiters are never part of the alphabet. Instances are
    read-only once built; use get_alphabet() to share one per configuration.
    """

    __slots__ = ("_symbols", "_index", "_separator", "_terminator")

    def __init__(self, size: int = MIN_ALPHABET_SIZE, separator: str = ',', terminator: str = ';'):
        if len(separator) != 1 or len(terminator) != 1:
            raise ValueError("Delimiters must be single characters")
        if separator == terminator:
            raise ValueError(f"Separator and terminator must differ, both are {separator!r}")

        candidates = [
            chr(code_point)
            for code_point in range(FIRST_CODE_POINT, LAST_CODE_POINT + 1)
            if chr(code_point) not in (separator, terminator)
        ]
        if not MIN_ALPHABET_SIZE <= size <= len(candidates):
            raise ValueError(f"Alphabet size must be within [{MIN_ALPHABET_SIZE}, {len(candidates)}], got {size}")

        self._symbols = "".join(candidates[:size])
        self._index = {symbol: i for i, symbol in enumerate(self._symbols)}
        self._separator = separator
        self._terminator = terminator

    @property
    def symbols(self) -> str:
        return self._symbols

    @property
    def base(self) -> int:
        return len(self._symbols)

    @property
    def separator(self) -> str:
        return self._separator

    @property
    def terminator(self) -> str:
        return self._terminator

    def __len__(self):
        return len(self._symbols)

    def __contains__(self, symbol):
        return symbol in self._index

    def __repr__(self):
        return f"Alphabet(size={self.base}, separator={self._separator!r}, terminator={self._terminator!r})"

    def encode_scalar(self, num: int) -> str:
        """
        Encodes a non-negative integer in base-B, most significant symbol first.

        :param num: Integer >= 0.
        :return: Symbol string, the first symbol alone for 0.
        """
        if isinstance(num, bool) or not isinstance(num, int):
            raise ValueError(f"Scalar must be an int, got {type(num).__name__}")
        if num < 0:
            raise ValueError(f"Scalar must be non-negative, got {num}")
        if num == 0:
            return self._symbols[0]

        base = self.base
        digits = []
        while num > 0:
            num, digit = divmod(num, base)
            digits.append(self._symbols[digit])
        return "".join(reversed(digits))

    def decode_scalar(self, encoded: str, marker: str = '?') -> int:
        """
        Decodes a base-B symbol string back into an integer.

        :param encoded: Symbol string produced by encode_scalar.
        :param marker: Method marker of the enclosing payload, used in errors.
        """
        if not encoded:
            raise MalformedPayload(marker, "empty scalar field")

        base = self.base
        result = 0
        for char in encoded:
            digit = self._index.get(char)
            if digit is None:
                raise MalformedPayload(marker, f"symbol {char!r} is not in the alphabet")
            result = result * base + digit
        return result

    def symbol_for(self, index: int) -> str:
        if not 0 <= index < MIN_ALPHABET_SIZE:
            raise ValueError(f"6-bit index out of range: {index}")
        return self._symbols[index]

    def index_of(self, symbol: str) -> int:
        """Returns the 6-bit index carried by symbol, or -1 if it carries none."""
        index = self._index.get(symbol, -1)
        return index if index < MIN_ALPHABET_SIZE else -1


@lru_cache(maxsize=None)
def get_alphabet(size: int = MIN_ALPHABET_SIZE, separator: str = ',', terminator: str = ';') -> Alphabet:
    return Alphabet(size=size, separator=separator, terminator=terminator)
