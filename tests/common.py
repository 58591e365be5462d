"""
Material layers and constructions shared by the unit tests.
"""
from ctf_calc import Quantity
from ctf_calc.construction import MaterialLayer, Construction, SurfaceRoughness

Q_ = Quantity


def concrete(t: float = 0.2, name: str = 'Concrete') -> MaterialLayer:
    return MaterialLayer.create(
        name=name,
        t=Q_(t, 'm'),
        k=Q_(1.95, 'W / (m * K)'),
        rho=Q_(2240.0, 'kg / m ** 3'),
        c=Q_(900.0, 'J / (kg * K)')
    )


def insulation(t: float = 0.05, name: str = 'Insulation') -> MaterialLayer:
    return MaterialLayer.create(
        name=name,
        t=Q_(t, 'm'),
        k=Q_(0.03, 'W / (m * K)'),
        rho=Q_(43.0, 'kg / m ** 3'),
        c=Q_(1210.0, 'J / (kg * K)')
    )


def gypsum(t: float = 0.0127, name: str = 'Gypsum board') -> MaterialLayer:
    return MaterialLayer.create(
        name=name,
        t=Q_(t, 'm'),
        k=Q_(0.16, 'W / (m * K)'),
        rho=Q_(800.0, 'kg / m ** 3'),
        c=Q_(1090.0, 'J / (kg * K)')
    )


def brick(t: float = 0.1, name: str = 'Brick') -> MaterialLayer:
    return MaterialLayer.create(
        name=name,
        t=Q_(t, 'm'),
        k=Q_(0.89, 'W / (m * K)'),
        rho=Q_(1920.0, 'kg / m ** 3'),
        c=Q_(790.0, 'J / (kg * K)')
    )


def air_gap(R: float = 0.18, name: str = 'Air gap') -> MaterialLayer:
    return MaterialLayer.create_no_mass(name, Q_(R, 'm ** 2 * K / W'))


def concrete_wall(name: str = 'Concrete wall', is_used: bool = True) -> Construction:
    # inside to outside
    return Construction.create(
        name=name,
        layers=[gypsum(), concrete(), insulation()],
        is_used=is_used,
        thermal_absorptance=(0.9, 0.85),
        solar_absorptance=(0.6, 0.4),
        roughness=SurfaceRoughness.ROUGH
    )


def cavity_wall(name: str = 'Cavity wall', is_used: bool = True) -> Construction:
    return Construction.create(
        name=name,
        layers=[gypsum(), brick(), air_gap(), insulation(0.06), brick()],
        is_used=is_used
    )


def single_layer(name: str = 'Slab', t: float = 0.2, is_used: bool = True) -> Construction:
    return Construction.create(name=name, layers=[concrete(t)], is_used=is_used)


def no_mass_construction(name: str = 'Curtain', is_used: bool = True) -> Construction:
    return Construction.create(
        name=name,
        layers=[air_gap(0.1, 'Film'), air_gap(0.3, 'Panel')],
        is_used=is_used
    )


def layered_wall(name: str = 'Sandwich', num_pairs: int = 5, is_used: bool = True) -> Construction:
    """Many thin alternating heavy and insulating layers."""
    layers = []
    for i in range(num_pairs):
        layers.append(concrete(0.05, f'Concrete {i + 1}'))
        layers.append(insulation(0.01, f'Insulation {i + 1}'))
    return Construction.create(name=name, layers=layers, is_used=is_used)
