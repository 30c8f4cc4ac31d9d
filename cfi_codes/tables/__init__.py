"""
Classification table sub-package for cfi-codes.

Contains YAML files that define the ISO 10962 categories, their groups and
the attribute domains of every group. The loader module (registry.py in the
parent package) reads these files once at runtime.
"""
