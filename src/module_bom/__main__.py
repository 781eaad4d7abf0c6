"""Run the buildpack steps with ``python -m module_bom``.

    python -m module_bom detect [PLATFORM_DIR] [PLAN_PATH]
    python -m module_bom build LAYERS_DIR PLATFORM_DIR [PLAN_PATH]
"""

import sys

from module_bom.cli import main

if __name__ == "__main__":
    sys.exit(main())
