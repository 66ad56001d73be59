"""
Configuration constants for the scaling analysis engine.
"""

# Sexes, in the order every per-sex series is emitted
SEXES = ("male", "female")

# Canonical reference individuals used for coefficient back-calculation
CANONICAL_REFERENCE_BASE = {
    "male": {"height": 178.0, "bmi": 24.0},
    "female": {"height": 164.0, "bmi": 24.0},
}

# Default formula selection
DEFAULT_BSA_FORMULA = "mosteller"
DEFAULT_LBM_FORMULA = "boer"

# Reference percentile: 1.96 is the upper limit of normal, 0 the population mean
DEFAULT_Z_SCORE = 1.96
MAX_PLAUSIBLE_Z_SCORE = 3.0

# Default simulated population grid (inclusive bounds)
DEFAULT_POPULATION_RANGE = {
    "height": {"min": 120.0, "max": 220.0, "step": 1.0},
    "bmi": {"min": 24.0, "max": 24.0, "step": 1.0},
}

# Bounds used when sampling realistic populations
POPULATION_LIMITS = {
    "height": (120.0, 220.0),
    "bmi": (16.0, 45.0),
}

# Chart settings
CHART_BSA_DECIMALS = 2
CHART_EXTRAPOLATION_STEP = 0.1
CHART_MIN_EXTENT = 3.5

# Correlation strength thresholds (absolute r, checked in order)
CORRELATION_STRENGTHS = [
    (0.9, "very_strong"),
    (0.7, "strong"),
    (0.5, "moderate"),
]
SIGNIFICANT_CORRELATION = 0.3

# Clinical relevance gaps between LBM and ratiometric BSA similarity (%)
CLINICAL_RELEVANCE_HIGH_GAP = 20.0
CLINICAL_RELEVANCE_LOW_GAP = 5.0

# BMI category upper bounds (kg/m²)
BMI_CATEGORIES = [
    (18.5, "underweight"),
    (25.0, "normal"),
    (30.0, "overweight"),
    (35.0, "obese_1"),
    (40.0, "obese_2"),
]
BMI_TOP_CATEGORY = "obese_3"

# BMI held fixed in height-only ranges
RANGE_FIXED_BMI = CANONICAL_REFERENCE_BASE["male"]["bmi"]
