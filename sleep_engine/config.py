"""
Sleep Engine — Configuration
Paths, constants, and global settings.
"""
from pathlib import Path

# ── Base paths ──────────────────────────────────────────────────
PACKAGE_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = Path.cwd() / "output_plots"

# ── Data files ──────────────────────────────────────────────────
MSLEEP_CSV = PACKAGE_DIR / "etl" / "msleep.csv"

# Columns the model needs; the rest of msleep is carried along unused
REQUIRED_COLUMNS = ("name", "sleep_total", "brainwt", "bodywt")

HOURS_PER_DAY = 24.0

# ── Model ──────────────────────────────────────────────────────
RESPONSE = "logit_sleep_ratio"
NAIVE_RESPONSE = "sleep_total"
PREDICTOR = "log_brainwt"

# Weakly informative priors on the logit scale
PRIOR_INTERCEPT_MU = 0.0
PRIOR_INTERCEPT_SIGMA = 3.0
PRIOR_SLOPE_MU = 0.0
PRIOR_SLOPE_SIGMA = 3.0

# ── MCMC settings ──────────────────────────────────────────────
MCMC_SAMPLES = 1000
MCMC_TUNE = 1000
MCMC_CHAINS = 4
MCMC_CORES = 1
TARGET_ACCEPT = 0.9
LAPLACE_SAMPLES = 4000
# Above this the Laplace fit on log(sigma) is treated as degenerate
LAPLACE_MAX_LOG_SIGMA_VAR = 25.0

# Convergence thresholds
RHAT_THRESHOLD = 1.05
ESS_THRESHOLD = 100

# ── Prediction ─────────────────────────────────────────────────
GRID_POINTS = 80
MAX_TREND_LINES = 400
PREDICTIVE_QUANTILES = (0.025, 0.5, 0.995)

# ── Plots ──────────────────────────────────────────────────────
HIGHLIGHT_MAMMALS = [
    "Domestic cat",
    "Human",
    "Dog",
    "Cow",
    "Rabbit",
    "Big brown bat",
    "House mouse",
    "Horse",
    "Golden hamster",
]

PLOT_FILES = {
    "scatter": "sleep_scatter.png",
    "trend": "sleep_trend.png",
    "ribbon": "sleep_ribbon.png",
}
