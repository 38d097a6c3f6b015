"""Allow ``python -m stop_and_go``."""

from stop_and_go.run import main

if __name__ == "__main__":
    main()
