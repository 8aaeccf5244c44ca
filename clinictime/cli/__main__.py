"""Allow ``python -m clinictime.cli``."""

from . import console_main

if __name__ == "__main__":
    console_main()
