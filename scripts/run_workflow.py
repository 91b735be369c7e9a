#!/usr/bin/env python3
"""
Run the classification workflow
===============================

Usage:
    python scripts/run_workflow.py                      # built-in defaults
    python scripts/run_workflow.py configs/iris.yaml --show
"""
import sys

from irisflow.workflow import main

if __name__ == "__main__":
    sys.exit(main())
