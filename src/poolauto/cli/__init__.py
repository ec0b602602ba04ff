"""Command-line interface modules for pool planning.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from poolauto.cli.run_planner import run_planner

__all__ = ['run_planner']
