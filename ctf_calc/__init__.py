from .pint_setup import UNITS, Quantity, SI_UNITS
