"""Business logic layer.

Pure analytics (no I/O, never raise for data shape):
    aggregator      — collection DNA, style distribution, recommendation seeds
    rarity          — per-release rarity score and the deep-cuts view
    comparator      — cosine-similarity taste compatibility between two users
    trade_matcher   — who owns what the other one wants

I/O-performing services (sequential, failure-tolerant):
    similar_artist_gateway  — paced batch lookups against a similar-artist provider
    recommendation_service  — per-style release recommendations
    collection_service      — fetch + cache collections and run the analytics
"""
