"""qmetrics services package.

Services sit on top of the pure analytics library and handle presentation
and persistence of its results.
"""
