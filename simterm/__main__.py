"""Entry point for running simterm as a module (``python -m simterm``)."""

from __future__ import annotations


def main() -> None:
    from simterm.cli.main import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
