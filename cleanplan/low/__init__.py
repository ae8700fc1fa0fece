"""
Low level representation of the scheduling domain -- not expected to be user facing.

Stabilises the contract between the pure computations (grid, overlap, planner, builder),
the assignment coordinator, and the caller which owns persistence of tasks and workers.
"""
