import sys

from annotate_edit.cli import main

sys.exit(main())
