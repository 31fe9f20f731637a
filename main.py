import os
import sys

# Inject the seo-monitor directory into sys.path
# This ensures all sub-packages (crawler, snapshots, detection, monitor, reporting) are resolvable.
sys.path.append(os.path.join(os.path.dirname(__file__), "seo-monitor"))

from monitor.cli import main

if __name__ == "__main__":
    sys.exit(main())
