import sys

from near_client.ui.main_window import run_app


def main() -> None:
	run_app(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
	main()
