"""
Plane-Wave Turbulence — Error Taxonomy
=======================================

Two kinds of problems exist in this package:

ConfigError
    Raised eagerly while a spectrum, geometry or field is being built.
    Fatal to that construction; nothing half-built is returned.

EvaluationWarning
    Emitted (never raised) by the field-access boundary in
    ``field_access`` when the underlying field evaluation fails. The
    consumer substitutes a zero field and carries on.
"""


class ConfigError(ValueError):
    """Invalid configuration detected at construction time."""


class EvaluationWarning(RuntimeWarning):
    """A field read failed and a zero field was substituted."""
