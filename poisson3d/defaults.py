"""Central place for poisson3d default settings."""

# Grid
DEFAULT_X_RANGE: int = 100
DEFAULT_Y_RANGE: int = 100
DEFAULT_Z_RANGE: int = 100
MIN_RANGE: int = 3  # One boundary cell on each side plus at least one interior cell

# Physical / numerical constants
DEFAULT_SPACE_STEP: float = 1.0
DEFAULT_PERMITTIVITY: float = 1.0

# Initial state of the potential away from the boundary
DEFAULT_INITIAL_VALUE: float = 0.0
DEFAULT_NOISE: float = 0.0  # Half-width of the uniform noise added per interior cell

# Convergence
DEFAULT_PRECISION: float = 1e-3  # Threshold on the L1 change of one sweep
DEFAULT_MAX_ITERATIONS: int | None = None  # None = iterate until converged
DEFAULT_PROGRESS_INTERVAL: int = 1000  # Sweeps between progress log lines

# Successive over-relaxation
DEFAULT_SOR_PARAMETER: float = 1.0  # omega = 1 is plain Gauss-Seidel

# Sources
DEFAULT_POINT_CHARGE: float = 1.0
DEFAULT_WIRE_DENSITY: float = 1.0

# Output
OUTPUT_COLUMN_WIDTH: int = 30
INPUT_FILENAME: str = "input.txt"
FIELD_FILENAME: str = "poissonOutput.dat"
RESULTS_FILENAME: str = "results.txt"
TIMESTAMP_FORMAT: str = "%Y-%m-%d_%H-%M-%S"
