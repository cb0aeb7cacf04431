import sys

from flight_scheduler.cli import main

sys.exit(main())
