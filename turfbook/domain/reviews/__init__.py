"""
Reviews Domain

Ratings left after a completed booking, one per booking, feeding the
turf's average rating.
"""
