import sys

from onesol_suite.main import main

sys.exit(main())
