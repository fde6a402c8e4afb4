import random

COMMON_WORDS = (
    "the", "be", "to", "of", "and", "a", "in", "that", "have", "i", "it",
    "for", "not", "on", "with", "he", "as", "you", "do", "at", "this", "but",
    "his", "by", "from", "they", "we", "say", "her", "she", "or", "an",
    "will", "my", "one", "all", "would", "there", "their", "what", "so",
    "up", "out", "if", "about", "who", "get", "which", "go", "me", "when",
    "make", "can", "like", "time", "no", "just", "him", "know", "take",
    "people", "into", "year", "your", "good", "some", "could", "them",
)


def generate_words(count=50, rng=random):
    """Return ``count`` random common words joined by single spaces."""
    count = max(1, int(count))
    return ' '.join(rng.choice(COMMON_WORDS) for _ in range(count))
