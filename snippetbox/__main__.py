import sys

from snippetbox.app import main

sys.exit(main())
