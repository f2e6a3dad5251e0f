import sys

from claudekit.pipeline import main

sys.exit(main())
