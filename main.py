import sys

from liftfsm.runner import main

if __name__ == '__main__':
    # Usage: python main.py [scenario.yaml]
    sys.exit(main())
