"""APSIS — Analytic Proximity Search for Intercepting Orbits.

Find the times at which two bodies on Keplerian orbits around the same
central body come within a distance of each other, or cross a given
separation such as a sphere-of-influence radius.

Modules:
    conic:      Conic-section formulas and anomaly conversions.
    orbit:      Orbit descriptor built from elements or state vectors.
    ranges:     Angle-range algebra on true anomaly.
    proximity:  True-anomaly ranges where two orbital paths can be close.
    windows:    Time windows where both bodies are inside their ranges.
    search:     Adaptive closest-approach search inside one window.
    intercept:  Pipeline orchestration, search settings and batch screening.
    catalog:    JSON orbit catalogs.
    viz:        Distance sampling, plots and reports.
    cli:        Command-line interface.

Example:
    >>> from apsis.orbit import Orbit
    >>> from apsis.intercept import InterceptFinder, SearchSettings
    >>>
    >>> moon = Orbit.from_elements(1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    >>> finder = InterceptFinder(SearchSettings.for_sphere_of_influence(0.17))
    >>> for hit in finder.find(probe, moon, 0.0, 6.3):
    ...     print(hit.summary())
"""

__version__ = "0.1.0"
