#!/usr/bin/env python3
"""
Batch Image Enhancer
Sharpen and equalize every image in a folder (default: images/ -> output/).
"""

import sys

from image_enhancer.batch import main

if __name__ == "__main__":
    sys.exit(main())
