"""
CLI Command Handlers Facade.

Re-exports handlers from `param_twin.cli.handlers` so the entry points (and
test patches) have a single module to target.
"""

from param_twin.cli.handlers.transform import handle_transform
from param_twin.cli.handlers.corpus import handle_harvest, handle_populate
