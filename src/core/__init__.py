"""
===============================================================================
LAMBERT TARGETER - Core Package
===============================================================================
Shared infrastructure for the Lambert solvers: physical constants, the error
taxonomy, solver settings and the special functions used by the time-of-flight
equations.

Modules:
    constants          : Physical constants and body lookup
    exceptions         : LambertError hierarchy
    config             : Solver settings dataclasses and YAML loading
    special_functions  : Stumpff and hypergeometric helpers
===============================================================================
"""
