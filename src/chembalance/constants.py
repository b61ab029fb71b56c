"""Grammar tokens and numerical constants."""

# Checked in this order; longer arrows first so "<=>" never splits as "->".
ARROW_TOKENS = ("<=>", "<->", "->")

STATE_SYMBOLS = ("s", "l", "g", "aq")

HYDRATE_SEPARATORS = ("·", "*")

# Entries below this magnitude are treated as zero during elimination.
PIVOT_TOLERANCE = 1e-10

# Largest denominator accepted when recovering rational coefficients.
COEFFICIENT_PRECISION = 1_000_000
