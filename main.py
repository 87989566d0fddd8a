#!/usr/bin/env python
from pydyslink.cli import main


if __name__ == "__main__":
    main()
