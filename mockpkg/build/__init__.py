"""Build configuration: platform tags, file constraints and import lookup."""

from .constraint import ConstraintSyntaxError, parse_go_build, parse_plus_build
from .context import BuildContext, release_tags
from .gomod import GoModule, find_module

__all__ = [
    "BuildContext",
    "ConstraintSyntaxError",
    "GoModule",
    "find_module",
    "parse_go_build",
    "parse_plus_build",
    "release_tags",
]
