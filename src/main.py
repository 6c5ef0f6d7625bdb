import sys
import logging

from config import EngineConfig
from csv_io import write_snapshots
from payments_engine import PaymentsEngine


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    config = EngineConfig.from_env()

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 1:
        print("Usage: payments <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    engine = PaymentsEngine(config)
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logging.getLogger(__name__).error(f"Cannot read {filepath}: {e}")
        return 1

    write_snapshots(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
