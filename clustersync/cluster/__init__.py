from clustersync.cluster.waits import (
    wait_for_blocks_to_be_freed,
    wait_for_file_cached,
    wait_for_persist,
)

__all__ = ["wait_for_blocks_to_be_freed", "wait_for_file_cached", "wait_for_persist"]
