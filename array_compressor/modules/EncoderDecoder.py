from dataclasses import replace
from typing import Dict, List
import numpy as np

from array_compressor.modules.Alphabet import Alphabet, PACKED_BITS, get_alphabet
from array_compressor.modules.CodecDefaults import CodecDefaults
from array_compressor.modules.CodecErrors import CodecError, InvalidEncoding, MalformedPayload, ValueOutOfRange
from array_compressor.modules.CodecObservabilityTracker import CodecObservabilityTracker
from array_compressor.util.logger import Logger

logger = Logger()
logger.set_logger_id('codec')

EMPTY_MARKER = 'E'


def check_marker(marker: str) -> str:
    if len(marker) != 1 or marker == EMPTY_MARKER:
        raise ValueError(f"Invalid strategy marker: {marker!r}")
    return marker


def prepare_values(values, min_value: int, max_value: int) -> np.ndarray:
    """
    Validates the input multiset and returns a sorted copy of it.

    :param values: Iterable of ints or an integer numpy array. Never modified.
    :return: Sorted int64 array.
    """
    items = values.ravel().tolist() if isinstance(values, np.ndarray) else list(values)
    for item in items:
        if isinstance(item, (bool, np.bool_)) or not isinstance(item, (int, np.integer)):
            raise ValueOutOfRange(item, min_value, max_value)
        if not min_value <= item <= max_value:
            raise ValueOutOfRange(item, min_value, max_value)
    return np.sort(np.array(items, dtype=np.int64))


# Base Encoding Strategy
class EncodingStrategy:
    marker = None
    name = None

    def __init__(self, alphabet: Alphabet, defaults: CodecDefaults):
        self.alphabet = alphabet
        self.defaults = defaults

    def encode(self, values) -> str:
        raise NotImplementedError

    def decode(self, payload: str) -> List[int]:
        raise NotImplementedError

    def sorted_copy(self, values) -> np.ndarray:
        return np.sort(np.asarray(values, dtype=np.int64))

    def split_records(self, payload: str, delimiter: str) -> List[str]:
        """
        Splits a payload made of delimiter-terminated records.

        Every record, the last one included, must be closed by the delimiter
        and must not be empty.
        """
        if not payload:
            return []
        if not payload.endswith(delimiter):
            raise MalformedPayload(self.marker, f"payload does not end with {delimiter!r}")

        records = payload[:-1].split(delimiter)
        if any(not record for record in records):
            raise MalformedPayload(self.marker, "empty record")
        return records

    def check_range(self, value: int):
        if not self.defaults.min_value <= value <= self.defaults.max_value:
            raise MalformedPayload(self.marker, f"decoded value {value} outside [{self.defaults.min_value}, {self.defaults.max_value}]")


# Run-Length Encoding: (start, length) per span stepping by exactly +1
class RunLengthEncoding(EncodingStrategy):
    marker = 'R'
    name = 'run_length'

    def find_runs(self, values) -> List[tuple]:
        """
        Splits the sorted values into maximal runs of consecutive integers.

        A repeated value starts a new run at the same start, so expanding the
        runs gives back the sorted multiset including duplicates.
        """
        sorted_values = self.sorted_copy(values)
        if sorted_values.size == 0:
            return []

        breaks = np.flatnonzero(np.diff(sorted_values) != 1) + 1
        starts = np.concatenate(([0], breaks))
        ends = np.concatenate((breaks, [sorted_values.size]))
        return [(int(sorted_values[s]), int(e - s)) for s, e in zip(starts, ends)]

    def encode(self, values) -> str:
        alphabet = self.alphabet
        sep, term = alphabet.separator, alphabet.terminator

        encoded = [self.marker]
        for start, length in self.find_runs(values):
            encoded.append(alphabet.encode_scalar(start) + sep + alphabet.encode_scalar(length) + term)
        return "".join(encoded)

    def decode(self, payload: str) -> List[int]:
        numbers = []
        for record in self.split_records(payload, self.alphabet.terminator):
            fields = record.split(self.alphabet.separator)
            if len(fields) != 2:
                raise MalformedPayload(self.marker, f"run record {record!r} needs exactly 2 fields")

            start = self.alphabet.decode_scalar(fields[0], self.marker)
            length = self.alphabet.decode_scalar(fields[1], self.marker)
            if length < 1:
                raise MalformedPayload(self.marker, f"run at {start} has length 0")
            self.check_range(start)
            self.check_range(start + length - 1)

            numbers.extend(range(start, start + length))
        return sorted(numbers)


# Bit-Packed frequency table: fixed-width (value, count) records in 6-bit symbols
class BitPackedEncoding(EncodingStrategy):
    marker = 'B'
    name = 'bit_packed'

    def __init__(self, alphabet: Alphabet, defaults: CodecDefaults):
        super().__init__(alphabet, defaults)
        span = defaults.max_value - defaults.min_value
        if span >= (1 << defaults.bits_per_number):
            raise ValueError(f"{defaults.bits_per_number} bits cannot hold {span + 1} distinct values")
        if defaults.bits_per_count < 1:
            raise ValueError("bits_per_count must be at least 1")

    @property
    def bits_per_entry(self) -> int:
        return self.defaults.bits_per_number + self.defaults.bits_per_count

    def frequency_table(self, values):
        """Returns (values, counts) for the in-range values, sorted by value."""
        sorted_values = self.sorted_copy(values)
        in_range = (sorted_values >= self.defaults.min_value) & (sorted_values <= self.defaults.max_value)
        return np.unique(sorted_values[in_range], return_counts=True)

    def pack_bits(self, bit_string: str) -> str:
        bit_string += "0" * (-len(bit_string) % PACKED_BITS)
        return "".join(
            self.alphabet.symbol_for(int(bit_string[i:i + PACKED_BITS], 2))
            for i in range(0, len(bit_string), PACKED_BITS)
        )

    def unpack_bits(self, packed: str) -> str:
        bits = []
        for char in packed:
            index = self.alphabet.index_of(char)
            if index == -1:
                raise MalformedPayload(self.marker, f"symbol {char!r} does not carry a 6-bit group")
            bits.append(f"{index:0{PACKED_BITS}b}")
        return "".join(bits)

    def encode(self, values) -> str:
        defaults = self.defaults
        entries, counts = self.frequency_table(values)

        max_count = defaults.max_count
        if np.any(counts > max_count):
            logger.log(f"Saturating {int(np.sum(counts > max_count))} count(s) at {max_count}")
        counts = np.minimum(counts, max_count)

        bit_string = "".join(
            f"{value - defaults.min_value:0{defaults.bits_per_number}b}{count:0{defaults.bits_per_count}b}"
            for value, count in zip(entries.tolist(), counts.tolist())
        )
        return self.marker + self.alphabet.encode_scalar(len(entries)) + self.alphabet.separator + self.pack_bits(bit_string)

    def decode(self, payload: str) -> List[int]:
        defaults = self.defaults
        sep_pos = payload.find(self.alphabet.separator)
        if sep_pos == -1:
            raise MalformedPayload(self.marker, "missing entry count separator")

        entry_count = self.alphabet.decode_scalar(payload[:sep_pos], self.marker)
        packed = payload[sep_pos + 1:]

        bits_per_entry = self.bits_per_entry
        expected_symbols = -(-entry_count * bits_per_entry // PACKED_BITS)
        if len(packed) != expected_symbols:
            raise MalformedPayload(self.marker, f"{entry_count} entries need {expected_symbols} symbols, got {len(packed)}")

        bit_string = self.unpack_bits(packed)

        numbers = []
        for i in range(entry_count):
            start = i * bits_per_entry
            value_end = start + defaults.bits_per_number

            value = int(bit_string[start:value_end], 2) + defaults.min_value
            count = int(bit_string[value_end:start + bits_per_entry], 2)
            if count == 0:
                raise MalformedPayload(self.marker, f"entry {i} has a zero count")
            self.check_range(value)

            numbers.extend([value] * count)
        return sorted(numbers)


# Direct Encoding: one scalar per element, duplicates kept
class DirectEncoding(EncodingStrategy):
    marker = 'D'
    name = 'direct'

    def encode(self, values) -> str:
        sep = self.alphabet.separator
        return self.marker + "".join(self.alphabet.encode_scalar(value) + sep for value in self.sorted_copy(values).tolist())

    def decode(self, payload: str) -> List[int]:
        numbers = []
        for field in self.split_records(payload, self.alphabet.separator):
            value = self.alphabet.decode_scalar(field, self.marker)
            self.check_range(value)
            numbers.append(value)
        return sorted(numbers)


# Encoder-Decoder Manager
class EncoderDecoderManager:
    def __init__(self, defaults: CodecDefaults = None, tracker: CodecObservabilityTracker = None):
        """
        Builds the alphabet and the three strategies from the codec defaults.

        :param defaults: Codec configuration, CodecDefaults() if omitted.
        :param tracker: Collects call and size counters, a new one if omitted.
        """
        self.defaults = defaults if defaults is not None else CodecDefaults()
        self.tracker = tracker if tracker is not None else CodecObservabilityTracker()
        self.alphabet, self.strategies = self.build_strategies(self.defaults)

    def build_strategies(self, defaults: CodecDefaults):
        """Returns the alphabet and the strategies for defaults without touching the manager."""
        alphabet = get_alphabet(defaults.alphabet_size, defaults.separator, defaults.terminator)

        # Evaluation order decides ties: the first shortest candidate wins
        strategies: Dict[str, EncodingStrategy] = {}
        for strategy in (DirectEncoding(alphabet, defaults),
                         RunLengthEncoding(alphabet, defaults),
                         BitPackedEncoding(alphabet, defaults)):
            strategies[check_marker(strategy.marker)] = strategy
        return alphabet, strategies

    def load_config(self, config: dict):
        """
        Applies config overrides on a copy of the defaults. The manager keeps
        its previous state if the new settings are rejected.
        """
        defaults = replace(self.defaults).update_defaults_from_config(config)
        alphabet, strategies = self.build_strategies(defaults)
        self.defaults, self.alphabet, self.strategies = defaults, alphabet, strategies

    def register_strategy(self, marker: str, strategy: EncodingStrategy):
        self.strategies[check_marker(marker)] = strategy

    def prepare_values(self, values) -> np.ndarray:
        return prepare_values(values, self.defaults.min_value, self.defaults.max_value)

    def serialize(self, values) -> str:
        """
        Encodes the multiset with every strategy and returns the shortest
        candidate that decodes back to exactly the same multiset.
        """
        sorted_values = np.empty(0, dtype=np.int64) if values is None else self.prepare_values(values)
        if sorted_values.size == 0:
            return self._emit(EMPTY_MARKER)

        expected = sorted_values.tolist()
        best = None
        lengths = {}
        for marker, strategy in self.strategies.items():
            candidate = strategy.encode(sorted_values)
            if not self._verify(marker, candidate, expected):
                continue

            lengths[marker] = len(candidate)
            if best is None or len(candidate) < len(best):
                best = candidate

        if best is None:
            raise CodecError("No strategy produced a verified encoding")

        logger.log(f"strategy: {best[0]}, candidates: {lengths}, values: {len(expected)}")
        return self._emit(best)

    def encode_with(self, marker: str, values) -> str:
        """Encodes with one named strategy, skipping selection and verification."""
        if marker not in self.strategies:
            raise InvalidEncoding(marker)

        sorted_values = self.prepare_values([] if values is None else values)
        return self.strategies[marker].encode(sorted_values)

    def deserialize(self, encoded: str) -> List[int]:
        if encoded is None:
            return []
        if not isinstance(encoded, str):
            raise TypeError(f"Encoded data must be a str, got {type(encoded).__name__}")

        self.tracker.update_ingress_metrics(encoded)
        self.tracker.update_deserialize_counter()

        if not encoded or encoded == EMPTY_MARKER:
            return []

        marker, payload = encoded[0], encoded[1:]
        if marker == EMPTY_MARKER:
            raise MalformedPayload(marker, "empty encoding must not carry a payload")
        if marker not in self.strategies:
            raise InvalidEncoding(marker)

        return self.strategies[marker].decode(payload)

    def _verify(self, marker: str, candidate: str, expected: List[int]) -> bool:
        try:
            decoded = self.strategies[marker].decode(candidate[1:])
        except MalformedPayload:
            decoded = None

        if decoded != expected:
            logger.log(f"Discarding '{marker}' candidate: does not reproduce the input")
            self.tracker.update_discarded_candidates()
            return False
        return True

    def _emit(self, encoded: str) -> str:
        self.tracker.update_serialize_counter(encoded[0])
        self.tracker.update_egress_metrics(encoded)
        return encoded
