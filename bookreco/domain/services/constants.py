# Categories with a dedicated one-hot slot in the feature vector.
# Anything else encodes as all zeros.
CATEGORY_SET = (
    "Fiction",
    "Science Fiction",
    "Romance",
    "History",
    "Business",
    "Technology",
    "Education",
    "Children",
)

# Price tiers relative to the global average price
BUDGET_RATIO = 0.7
MID_RANGE_RATIO = 1.3
TIER_BUDGET = 1.0
TIER_MID_RANGE = 0.5
TIER_PREMIUM = 0.0
DEFAULT_GLOBAL_AVG_PRICE = 20.0

# K-means
MAX_ITERATIONS = 100
CONVERGENCE_TOLERANCE = 0.001

# Similar items (per request)
DEFAULT_SIMILAR_LIMIT = 6
MIN_OTHER_ITEMS = 3         # below this the catalog is too small to cluster
SIMILAR_MAX_K = 5
SIMILAR_ITEMS_PER_CLUSTER = 3
MIN_CLUSTER_SIZE = 2        # target + at least one mate
MIN_K = 2

# Batch refresh (whole catalog)
REFRESH_MAX_K = 8
REFRESH_ITEMS_PER_CLUSTER = 4

# Category fallback
CATEGORY_FALLBACK_SCORE = 0.7
