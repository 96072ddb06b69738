"""Allows the ormtour.probes package to be run as a script."""

from . import main


if __name__ == "__main__":
    main()
