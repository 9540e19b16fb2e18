"""
Allow running the package as a module:
    python -m continuation_machine probe
    python -m continuation_machine run REMOVE_COMMAS 1 2 3
"""

import sys

from continuation_machine.cli import main

if __name__ == '__main__':
    sys.exit(main())
