"""Allow ``python -m horn_prover``."""

import sys

from .cli import main

sys.exit(main())
