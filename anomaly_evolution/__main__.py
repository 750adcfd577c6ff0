"""
Entry point for running the anomaly detector as a module.

Usage:
    python -m anomaly_evolution generate --output-dir data
    python -m anomaly_evolution train --training-dir data/training_data \
        --good-dir data/good_testing_data --bad-dir data/bad_testing_data
"""

import sys

from .cli import main


if __name__ == '__main__':
    sys.exit(main())
