"""
Configuration constants for the growth reference engine.
"""

# Growth stage boundaries (age in months)
INFANT_MAX_MONTHS = 24
ADOLESCENT_MIN_MONTHS = 120

# Records within this distance (kg) of the closest weight form its weight group
WEIGHT_GROUP_TOLERANCE_KG = 0.1

# Discrete z-score points supplied by the curve dataset
Z_SCORE_POINTS = (-2, -1, 0, 1, 2)

# Closeness mapping: (upper deviation %, score at lower bound, slope per %)
CLOSENESS_FULL_SCORE_DEVIATION = 10.0
CLOSENESS_BANDS = [
    (20.0, 100.0, 1.0),
    (30.0, 90.0, 1.5),
    (40.0, 75.0, 1.5),
]
CLOSENESS_TAIL_SCORE = 60.0
CLOSENESS_TAIL_SLOPE = 1.0

# Minimum score for each closeness label, highest first
CLOSENESS_LABEL_THRESHOLDS = {
    "EXCELLENT": 90,
    "VERY_CLOSE": 75,
    "CLOSE": 60,
    "MODERATE": 40,
}

# Patient input limits
WEIGHT_LIMITS_KG = (0.01, 150.0)
HEIGHT_LIMITS_CM = (0.01, 220.0)
