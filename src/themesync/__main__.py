"""Entry point for `python -m themesync`."""

from themesync.cli.app import app


def main() -> None:
    """Run the themesync command line."""

    app()


if __name__ == "__main__":
    main()
