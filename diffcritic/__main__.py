import sys

from diffcritic.action import main

if __name__ == "__main__":
    sys.exit(main())
