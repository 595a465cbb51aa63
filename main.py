"""mcuxeq - Microcontroller Command/Response Utility.

Run from a source checkout: python main.py -s /dev/ttyUSB0 <command> ...
"""

import sys

from mcuxeq.cli import main

if __name__ == '__main__':
    sys.exit(main())
