"""
Zernsdorf Waste Calendar — Entry Point.

`python main.py <command>` runs the waste calendar CLI, which sets up
logging from LOG_LEVEL itself.
"""

import sys

from wastecal.cli import main

if __name__ == "__main__":
    sys.exit(main())
