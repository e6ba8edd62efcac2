"""Entry point for `python -m htmlemailer` and `htmlemailer` CLI."""

from htmlemailer.cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
