"""
The VIEW layer: renderer-side consumers of the decoded model (PyVista).
"""
