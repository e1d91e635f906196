import json
from dataclasses import dataclass
from typing import List

import numpy as np
from tqdm import tqdm

from array_compressor.modules.CodecErrors import CodecError
from array_compressor.modules.EncoderDecoder import EncoderDecoderManager
from array_compressor.util.logger import Logger

logger = Logger()
logger.set_logger_id('benchmark')


@dataclass
class CaseResult:
    name: str
    original: int
    compressed: int
    ratio: float
    correct: bool
    marker: str


class BenchmarkSuite:
    def __init__(self, manager: EncoderDecoderManager = None, seed: int = None, preview_length: int = 100):
        """
        Runs fixed and random integer collections through the codec and
        reports size, compression ratio and round-trip correctness.

        :param manager: Codec under test, a default manager if omitted.
        :param seed: Seed for the random cases.
        :param preview_length: Characters of the original JSON shown per case.
        """
        self.manager = manager if manager is not None else EncoderDecoderManager()
        self.rng = np.random.default_rng(seed)
        self.preview_length = preview_length

    def generate_random_numbers(self, count: int, low: int = None, high: int = None) -> np.ndarray:
        defaults = self.manager.defaults
        low = defaults.min_value if low is None else max(low, defaults.min_value)
        high = defaults.max_value if high is None else min(high, defaults.max_value)
        if low > high:
            return np.empty(0, dtype=np.int64)
        return self.rng.integers(low, high + 1, size=count)

    def within_range(self, numbers) -> np.ndarray:
        """Drops the values of a fixed case that the configured range excludes."""
        defaults = self.manager.defaults
        numbers = np.asarray(numbers, dtype=np.int64)
        return numbers[(numbers >= defaults.min_value) & (numbers <= defaults.max_value)]

    def run_case(self, name: str, numbers) -> CaseResult:
        numbers = [int(n) for n in numbers]
        original = json.dumps(numbers, separators=(",", ":"))

        try:
            compressed = self.manager.serialize(numbers)
            decompressed = self.manager.deserialize(compressed)
        except CodecError as exc:
            logger.error(f"{name}: {exc}")
            tqdm.write(f"\n=== {name} ===\nError: {exc}\nCorrect: False")
            return CaseResult(name=name, original=len(original), compressed=0, ratio=0.0, correct=False, marker="")

        # Multiset comparison, order does not matter
        correct = sorted(numbers) == sorted(decompressed)
        ratio = round((len(original) - len(compressed)) / len(original) * 100, 1)

        preview = original[:self.preview_length] + ("..." if len(original) > self.preview_length else "")
        lines = [
            f"\n=== {name} ===",
            f"Original: {preview}",
            f"Compressed: {compressed}",
            f"Original length: {len(original)}",
            f"Compressed length: {len(compressed)}",
            f"Compression ratio: {ratio}%",
            f"Correct: {correct}",
        ]
        if not correct:
            lines.append(f"Expected: {sorted(numbers)}")
            lines.append(f"Got: {sorted(decompressed)}")
        tqdm.write("\n".join(lines))

        return CaseResult(
            name=name,
            original=len(original),
            compressed=len(compressed),
            ratio=ratio,
            correct=correct,
            marker=compressed[0],
        )

    def build_cases(self) -> list:
        defaults = self.manager.defaults
        low, high = defaults.min_value, defaults.max_value

        return [
            # Short fixed cases
            ("Empty array", []),
            ("Single number", self.within_range([42])),
            ("Two numbers", [low, high]),
            ("Short consecutive", self.within_range([1, 2, 3, 4, 5])),
            ("Short non-consecutive", self.within_range([1, 5, 10, 50, 100])),

            # Random cases
            ("Random 50 numbers", self.generate_random_numbers(50)),
            ("Random 100 numbers", self.generate_random_numbers(100)),
            ("Random 500 numbers", self.generate_random_numbers(500)),
            ("Random 1000 numbers", self.generate_random_numbers(1000)),

            # Digit-width cases
            ("All one-digit numbers", self.generate_random_numbers(100, 1, 9)),
            ("All two-digit numbers", self.generate_random_numbers(100, 10, 90)),
            ("All three-digit numbers", self.generate_random_numbers(1000, 100, 300)),

            # Every value three times
            (f"Each number 3 times ({3 * (high - low + 1)} total)", np.repeat(np.arange(low, high + 1), 3)),

            # Consecutive ranges
            ("Range 1-50", self.within_range(np.arange(1, 51))),
            ("Range 100-200", self.within_range(np.arange(100, 201))),
            ("Range 250-300", self.within_range(np.arange(250, 301))),
        ]

    def run_all_cases(self, progress: bool = True) -> List[CaseResult]:
        cases = self.build_cases()
        results = [self.run_case(name, numbers) for name, numbers in tqdm(cases, desc="Benchmark Progress", disable=not progress)]
        self.print_summary(results)
        return results

    def print_summary(self, results: List[CaseResult]):
        if not results:
            logger.error("No benchmark cases were run")
            return

        average_ratio = sum(r.ratio for r in results) / len(results)
        print("\n=== SUMMARY ===")
        print(f"Average compression ratio: {average_ratio:.1f}%")
        print(f"All cases passed: {all(r.correct for r in results)}")
        logger.log(f"codec metrics: {self.manager.tracker.get_codec_metrics()}")
