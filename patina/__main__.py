import sys

from patina.main import main

sys.exit(main())
