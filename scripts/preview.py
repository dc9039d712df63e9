"""
Preview script for the BBTXT data pipeline.

The logic lives in bbtxt_data.cli; this wrapper allows running it from a
source checkout without installing the package.

Usage:
    python scripts/preview.py --config data.yaml --batches 4 --dump-dir runs/preview
"""
import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from bbtxt_data.cli import main


if __name__ == '__main__':
    raise SystemExit(main())
