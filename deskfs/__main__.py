# python
"""
deskfs.__main__
Entry point for python -m deskfs
"""
import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
