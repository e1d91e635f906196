import argparse
import sys

from array_compressor.modules import BenchmarkSuite as benchmark_module
from array_compressor.modules import EncoderDecoder
from array_compressor.modules.BenchmarkSuite import BenchmarkSuite
from array_compressor.modules.CodecDefaults import CodecDefaults, load_config
from array_compressor.modules.EncoderDecoder import EncoderDecoderManager


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Benchmark the compact integer array codec.")
    parser.add_argument("--seed", type=int, default=None, help="seed for the random cases")
    parser.add_argument("--config", default=None, help="JSON file overriding the codec defaults")
    parser.add_argument("--quiet", action="store_true", help="hide codec and benchmark logs and the progress bar")
    args = parser.parse_args(argv)

    defaults = load_config(args.config) if args.config else CodecDefaults()
    if args.quiet:
        EncoderDecoder.logger.set_verbose(False)
        benchmark_module.logger.set_verbose(False)

    suite = BenchmarkSuite(manager=EncoderDecoderManager(defaults=defaults), seed=args.seed)
    results = suite.run_all_cases(progress=not args.quiet)
    return 0 if all(r.correct for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
