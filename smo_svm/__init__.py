from .exceptions import (
    SMOConfigurationError,
    DatasetContractError,
    SolverInvariantError,
)

from .index_set import NONE, IndexSet

from .kernels import (
    KERNELS,
    PolyKernel,
    RBFKernel,
    make_kernel,
    sparse_dot_product,
)

from .kernel_cache import CACHE_SLOTS, KernelCache

from .dataset import (
    NUMERIC,
    NOMINAL,
    STRING,
    Attribute,
    Dataset,
    SparseData,
)

from .filters import DataPreprocessor

from .smo_solver import (
    DEFAULT_C,
    DEFAULT_CACHE_SIZE,
    DEFAULT_TOL,
    DEFAULT_EPS,
    BinarySMO,
    SMOResult,
    SolverState,
    train_binary_smo,
)

from .multiclass import SMOClassifier

__all__ = [
    # Errors
    "SMOConfigurationError",
    "DatasetContractError",
    "SolverInvariantError",
    # Index set
    "NONE",
    "IndexSet",
    # Kernels
    "KERNELS",
    "PolyKernel",
    "RBFKernel",
    "make_kernel",
    "sparse_dot_product",
    "CACHE_SLOTS",
    "KernelCache",
    # Data
    "NUMERIC",
    "NOMINAL",
    "STRING",
    "Attribute",
    "Dataset",
    "SparseData",
    "DataPreprocessor",
    # Solver
    "DEFAULT_C",
    "DEFAULT_CACHE_SIZE",
    "DEFAULT_TOL",
    "DEFAULT_EPS",
    "BinarySMO",
    "SMOResult",
    "SolverState",
    "train_binary_smo",
    "SMOClassifier",
]
