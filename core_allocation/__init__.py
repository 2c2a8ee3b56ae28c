"""Core allocation package for splitting allocated nodes between parallel runs.

This package provides the planning, assignment and validation logic used to
divide a pool of uniform compute nodes between runs that each need a fixed
number of cores, and to write one machinefile per run.
"""

__version__ = "1.0.0"
