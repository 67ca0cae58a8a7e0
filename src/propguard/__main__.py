import sys

from propguard.cli.main import main


sys.exit(main())
