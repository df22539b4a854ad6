from ..core.CPU._parallel import ParallelExecutor, partition
from ..geom.commons._enums import ParallelizationMethod

__all__ = ["ParallelExecutor", "partition", "ParallelizationMethod"]
