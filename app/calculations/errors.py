"""
Calculation Errors

Errors raised by the financial calculation engine.
"""


class InvalidInputError(ValueError):
    """
    Raised when a calculator is given inputs it cannot work with.

    Covers non-positive principal, tenure or periods, negative rates and
    debt payments that never cover the accruing interest. Zero-rate loans
    and deposits are not errors; they are handled by their own formulas.
    """

    pass
