import sys

from dotenv import load_dotenv

from lowborn.presentation.cli import main


def run() -> int:
    load_dotenv()
    return main()


if __name__ == "__main__":
    sys.exit(run())
