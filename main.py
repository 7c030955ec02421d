#!/usr/bin/env python3
"""
Storage Upgrade Job

- Upgrades the storage control plane with `helm upgrade --reuse-values`
- With --restart-data-plane, restarts the data-plane pods one node at a time,
  waiting for drains and volume rebuilds to settle before touching the next node

This script supports running directly from a source checkout that uses a
src/ layout. It adds the local `src/` directory to sys.path before importing.
For production use, prefer installing the project and using the provided
console script.
"""

import os
import sys

# Add src/ to path to import modules directly
REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from cli import main

if __name__ == "__main__":
    sys.exit(main())
