import json
from dataclasses import dataclass, fields


@dataclass
class CodecDefaults:
    min_value: int = 1
    max_value: int = 300
    bits_per_number: int = 9  # 2^9 = 512 > 300
    bits_per_count: int = 8  # up to 255 occurrences per value
    separator: str = ','
    terminator: str = ';'
    alphabet_size: int = 64

    @property
    def max_count(self) -> int:
        return (1 << self.bits_per_count) - 1

    def update_defaults_from_config(self, config: dict):
        """
        Overrides the defaults with the matching keys of a config dict.

        :param config: Mapping of field name to value. Unknown keys are ignored.
        """
        self.min_value = config.get('min_value', self.min_value)
        self.max_value = config.get('max_value', self.max_value)
        self.bits_per_number = config.get('bits_per_number', self.bits_per_number)
        self.bits_per_count = config.get('bits_per_count', self.bits_per_count)
        self.separator = config.get('separator', self.separator)
        self.terminator = config.get('terminator', self.terminator)
        self.alphabet_size = config.get('alphabet_size', self.alphabet_size)
        return self

    def to_config(self) -> dict:
        return {field.name: getattr(self, field.name) for field in fields(self)}


def load_config(path) -> CodecDefaults:
    """Reads a JSON config file into a fresh CodecDefaults."""
    with open(path, "r") as config_file:
        config = json.load(config_file)
    return CodecDefaults().update_defaults_from_config(config)
