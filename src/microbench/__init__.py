"""Discovery-driven micro-benchmarking."""

from .descriptors import (
    BenchmarkDescriptor as BenchmarkDescriptor,
)
from .descriptors import (
    TestDescriptor as TestDescriptor,
)
from .discovery import (
    ModulesBenchmarkFactory as ModulesBenchmarkFactory,
)
from .discovery import (
    TypesBenchmarkFactory as TypesBenchmarkFactory,
)
from .discovery import (
    discover as discover,
)
from .engine import (
    BenchmarkEngine as BenchmarkEngine,
)
from .engine import (
    ProgressEvent as ProgressEvent,
)
from .engine import (
    execute_and_render as execute_and_render,
)
from .engine import (
    execute_single as execute_single,
)
from .isolation import (
    IsolatedRunner as IsolatedRunner,
)
from .metadata import (
    benchmark as benchmark,
)
from .metadata import (
    benchmarked as benchmarked,
)
from .metadata import (
    cleanup as cleanup,
)
from .metadata import (
    setup as setup,
)
from .options import (
    BenchmarkOptions as BenchmarkOptions,
)
from .options import (
    SearchMode as SearchMode,
)
from .performer import (
    BenchmarkCancelledError as BenchmarkCancelledError,
)
from .reporting import (
    JsonReporter as JsonReporter,
)
from .reporting import (
    TextReporter as TextReporter,
)
from .stats import (
    BasicStatistics as BasicStatistics,
)
from .stats import (
    Statistics as Statistics,
)
