import functools

# Common English words ignored when computing keyword density of blog content.
KEYWORD_STOPWORDS = frozenset({
    "this", "that", "with", "have", "will", "from", "they", "been", "said", "each", "which", "their", "time", "more",
    "very", "what", "know", "just", "first", "into", "over", "think", "also", "your", "work", "life", "only", "can",
    "still", "should", "after", "being", "now", "made", "before", "here", "through", "when", "where", "much", "some",
    "these", "many", "would", "there"
})


def combine_stopwords(func):
    """Decorator that supplies the keyword stopword set when the caller passes none."""
    @functools.wraps(func)
    def wrapper(words, stopwords=None, *args, **kwargs):
        if stopwords is None:
            stopwords = KEYWORD_STOPWORDS
        return func(words, stopwords, *args, **kwargs)
    return wrapper
