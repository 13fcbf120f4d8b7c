"""
Allow running with `python -m csse_timeseries`
"""

import sys

from csse_timeseries.cli import main

if __name__ == "__main__":
    sys.exit(main())
