"""Settings package for the VillaStay project.

`base.py` contains configuration shared across environments. `dev.py`,
`prod.py` and `test.py` extend it with environment specific overrides.
"""
