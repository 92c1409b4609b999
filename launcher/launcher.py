#!/usr/bin/env python3
"""
Dark & Light Dedicated Server Launcher
"""

import sys
from dnl_launcher.cli import main

if __name__ == "__main__":
    sys.exit(main())
