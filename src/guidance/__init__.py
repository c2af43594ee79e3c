"""
===============================================================================
LAMBERT TARGETER - Guidance Package
===============================================================================
Zero-revolution Lambert solvers for transfer targeting.

Modules:
    transfer_geometry       : Chord, semi-perimeter, transfer angle and plane
    izzo_time_of_flight     : Izzo normalized time of flight T(x)
    izzo_lambert            : Izzo secant solver
    gooding_lambert         : Gooding Lambert functions and Newton solver
    velocity_reconstruction : Velocities from the solved shape parameter
    lambert_targeter        : Entry points dispatching to either solver
===============================================================================
"""
