"""Edit-distance helpers used for fuzzy name matching.

`distance` is the classic Levenshtein distance (insertions, deletions and
substitutions each cost 1). `similarity` turns it into a 0-100 score relative
to the longer of the two strings. Both are case-sensitive; callers normalize
case before calling.
"""


def distance(a, b):
    """Return the minimum number of single-character edits turning a into b.

    Uses the full (len(a)+1) x (len(b)+1) dynamic programming table. Names in
    the corpus are short so no banding is needed.
    """
    m = len(a)
    n = len(b)
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m + 1):
        dp[i][0] = i
    for j in range(n + 1):
        dp[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if a[i - 1] == b[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = min(
                    dp[i - 1][j] + 1,  # deletion
                    dp[i][j - 1] + 1,  # insertion
                    dp[i - 1][j - 1] + 1,  # substitution
                )
    return dp[m][n]


def similarity(a, b):
    """Percentage similarity in [0, 100]; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 100.0
    score = 100.0 * (longest - distance(a, b)) / longest
    return max(0.0, min(100.0, score))
