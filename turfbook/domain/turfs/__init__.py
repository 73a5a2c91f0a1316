"""
Turfs Domain

Turf setup: pricing, capacity, weekly opening hours with peak windows,
holidays and maintenance dates, and the per-day availability view.
"""
