import pint

UNITS = pint.UnitRegistry()
Quantity = UNITS.Quantity

UNITS.define('fraction = [] = frac')
pint.set_application_registry(UNITS)

# Units in which layer properties and CTF coefficients are stored and reported.
SI_UNITS = {
    'length': 'm',
    'conductivity': 'W / (m * K)',
    'density': 'kg / m ** 3',
    'specific_heat': 'J / (kg * K)',
    'resistance': 'm ** 2 * K / W',
    'conductance': 'W / (m ** 2 * K)',
    'time': 'hr'
}
