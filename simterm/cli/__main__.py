#!/usr/bin/env python3
"""Entry point for the simterm CLI when run as python -m simterm.cli."""

if __name__ == "__main__":
    from simterm.cli.main import main

    main()
