"""Entry point for python -m bigram_histogram."""
import sys

from .cli import main

sys.exit(main())
