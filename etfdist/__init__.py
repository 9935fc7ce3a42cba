__version__ = "0.1.0"

from .categories import Bounded, Category, Composite, RejectionComposite, make_category
from .exceptions import EtfError, InvalidTableSize, PartitionConvergenceError, RngRangeError
from .partition import (
    PartitionData,
    limit_newton_step,
    newton_partition,
    newton_partition_monotonic,
    solve_tridiagonal_system,
    trapezoidal_prepartition,
)
from .random_digits import (
    MAX_WIDTH,
    check_rng_range,
    generate_random_integer,
    generate_random_integers,
    generate_random_real,
    generate_random_reals,
)
from .rng import BitGeneratorSource, StdlibRandomSource, Xoroshiro128Plus, as_random_source
from .sampler import (
    EtfDistribution,
    make_central_distribution,
    make_distribution,
    make_symmetric_distribution,
)
from .shapes import Asymmetric, Central, Shape, Symmetric
from .table import EtfTable, build_table

__all__ = [
    "__version__",
    "Bounded",
    "Category",
    "Composite",
    "RejectionComposite",
    "make_category",
    "EtfError",
    "InvalidTableSize",
    "PartitionConvergenceError",
    "RngRangeError",
    "PartitionData",
    "limit_newton_step",
    "newton_partition",
    "newton_partition_monotonic",
    "solve_tridiagonal_system",
    "trapezoidal_prepartition",
    "MAX_WIDTH",
    "check_rng_range",
    "generate_random_integer",
    "generate_random_integers",
    "generate_random_real",
    "generate_random_reals",
    "BitGeneratorSource",
    "StdlibRandomSource",
    "Xoroshiro128Plus",
    "as_random_source",
    "EtfDistribution",
    "make_central_distribution",
    "make_distribution",
    "make_symmetric_distribution",
    "Asymmetric",
    "Central",
    "Shape",
    "Symmetric",
    "EtfTable",
    "build_table",
]
