"""Built-in workload generators."""

from seqcheck.plugins.generators.sequential import (
    LastWrittenWindow,
    ReadGenerator,
    SequentialWorkload,
    WriteGenerator,
)

__all__ = ["LastWrittenWindow", "ReadGenerator", "SequentialWorkload", "WriteGenerator"]
