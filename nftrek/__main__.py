"""
Allow the nftrek package to be executed as a module.

This enables running the service with:
    python -m nftrek serve
    python -m nftrek mint --image photo.jpg --owner <address> --lat 37.77 --lon -122.41
"""

import sys

from nftrek.main import main

if __name__ == "__main__":
    sys.exit(main())
