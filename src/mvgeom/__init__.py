# mvgeom - Multiview geometry estimation kernels

__version__ = "0.1.0"

# Errors
from mvgeom.errors import (
    MultiviewError,
    DegenerateInput,
    NumericalSingularity,
    InvalidParameterization,
)

# Core types
from mvgeom.types import (
    CameraDecomposition,
    Normalization,
    BoundingBox,
    EstimationConfig,
)

# Coordinates
from mvgeom.coordinates import (
    euclidean_to_homogeneous,
    homogeneous_to_euclidean,
    project,
    depth,
)

# Projection algebra
from mvgeom.projection import (
    p_from_krt,
    krt_from_p,
    k_from_absolute_conic,
)

# Parameterization
from mvgeom.parameterization import (
    rank2_to_matrix,
    rank2_from_matrix,
    pose_to_vector,
    pose_from_vector,
)

# Kernels
from mvgeom.kernel import (
    AsymmetricError,
    SymmetricError,
    Kernel,
    NormalizedSolver,
    TwoPointSolver,
    FourPointSolver,
    ThreePointSolver,
)

# Mosaic chaining
from mvgeom.mosaic import (
    chain_transforms,
    global_bounding_box,
    registration_transform,
)

# Configuration
from mvgeom.config import (
    load_estimation_config,
    save_estimation_config,
    create_default_estimation_config,
    create_kernel,
    inlier_threshold,
)

__all__ = [
    # Errors
    "MultiviewError",
    "DegenerateInput",
    "NumericalSingularity",
    "InvalidParameterization",
    # Core types
    "CameraDecomposition",
    "Normalization",
    "BoundingBox",
    "EstimationConfig",
    # Coordinates
    "euclidean_to_homogeneous",
    "homogeneous_to_euclidean",
    "project",
    "depth",
    # Projection algebra
    "p_from_krt",
    "krt_from_p",
    "k_from_absolute_conic",
    # Parameterization
    "rank2_to_matrix",
    "rank2_from_matrix",
    "pose_to_vector",
    "pose_from_vector",
    # Kernels
    "AsymmetricError",
    "SymmetricError",
    "Kernel",
    "NormalizedSolver",
    "TwoPointSolver",
    "FourPointSolver",
    "ThreePointSolver",
    # Mosaic chaining
    "chain_transforms",
    "global_bounding_box",
    "registration_transform",
    # Configuration
    "load_estimation_config",
    "save_estimation_config",
    "create_default_estimation_config",
    "create_kernel",
    "inlier_threshold",
]
