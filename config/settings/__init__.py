"""Settings package for the reservations project.

`base.py` contains common configuration shared across environments.
The `dev.py`, `test.py` and `prod.py` modules extend it with
environment specific overrides.
"""
