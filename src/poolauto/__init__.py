"""`poolauto` - declarative storage pool planning.

Subpackages:
- records: Resource records, plan entries, RAID tables
- selection: Predicates, selectors, list selection
- planning: Node planner, topology builder, pool planner
- schemas: Layered configuration
- contracts: Errors and output contracts
- cli: File-based runner
"""

__version__ = "0.1.0"
