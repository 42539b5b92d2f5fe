# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Root conftest.py to make copilot_airbrake importable without installation."""

import sys
from pathlib import Path

# Add repo root to sys.path so copilot_airbrake can be imported from tests/
_repo_root = Path(__file__).parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))
