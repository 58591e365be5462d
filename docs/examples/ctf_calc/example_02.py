"""
EXAMPLE 2
---------
CTF CALCULATION OF ALL CONSTRUCTIONS OF A BUILDING MODEL, WITH CTF REPORT.

The construction 'Curtain' only consists of no-mass layers. Its CTFs can't be
calculated, so the calculation stops with a fatal error after the CTF report
of all other constructions has been written.
"""
from ctf_calc import Quantity
from ctf_calc.construction import MaterialLayer, Construction
from ctf_calc.ctf import CTFSettings, run
from ctf_calc.exceptions import CTFInitializationError

Q_ = Quantity


def create_layer(name, t, k, rho, c):
    return MaterialLayer.create(
        name=name,
        t=Q_(t, 'mm'),
        k=Q_(k, 'W / (m * K)'),
        rho=Q_(rho, 'kg / m ** 3'),
        c=Q_(c, 'J / (kg * K)')
    )


brick = create_layer('Face brick', 100, 0.89, 1920, 790)
wool = create_layer('Mineral wool', 60, 0.035, 30, 1030)
block = create_layer('Concrete block', 140, 0.51, 1400, 1000)
plaster = create_layer('Plaster', 15, 0.72, 1860, 840)
screed = create_layer('Screed', 60, 1.3, 2000, 1000)
cavity = MaterialLayer.create_no_mass('Air cavity', Q_(0.18, 'm ** 2 * K / W'))

constructions = [
    Construction.create('Cavity wall', [plaster, block, wool, cavity, brick]),
    Construction.create('Interior wall', [plaster, block, plaster]),
    Construction.create('Floor', [screed, wool], is_used=False),
    Construction.create('Curtain', [
        MaterialLayer.create_no_mass('Curtain fabric', Q_(0.05, 'm ** 2 * K / W')),
        cavity
    ])
]

settings = CTFSettings(
    time_step=Q_(1, 'hr'),
    report_constructions=True
)

try:
    batch = run(constructions, settings, report_file='ctf_report.eio', log_file='ctf.log')
except CTFInitializationError as err:
    print(err)
    batch = err.batch_result

for outcome in batch.outcomes:
    if outcome.succeeded:
        print(f"{outcome.index}. {outcome.construction.name}: {outcome.ctf.num_terms} CTF terms")
    else:
        print(f"{outcome.index}. {outcome.construction.name}: {outcome.error}")
