"""Classes under test for the peephole suite.

Each module plays the role of an "assembly": accessors resolve classes in it by
module path and qualified name.
"""
