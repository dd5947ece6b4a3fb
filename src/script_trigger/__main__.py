# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Main entry point for running script_trigger as a module."""

from script_trigger.cli import main

if __name__ == "__main__":
    main()
