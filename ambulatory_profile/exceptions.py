"""
Exception types for the ambulatory profile engine.

Data quality problems never raise: the pipeline degrades to zeroed or
unavailable values instead. Only caller mistakes (unknown biomarker, wrong
container types, tracks of the wrong length) raise ContractViolation.
"""


class ContractViolation(ValueError):
    """Raised when a caller passes structurally invalid input."""


class InvalidThresholdConfig(ValueError):
    """A threshold mapping failed validation.

    Raised while parsing candidate ranges and always caught by the
    RangeResolver, which then falls through to the next tier.
    """
