"""
progchain — chaining tool descriptors into a capability graph.

A Program declares which parameters it needs (alternative bundles) and
which parameters it produces. progchain works out which programs can feed
which others, lets consumers inherit what their producers hand them, and
answers "what can I run starting from these parameters?".

ARCHITECTURAL GUARANTEE:
------------------------
This package never executes the underlying tools.
It reasons about capability compatibility only.

Layers:
    - model / matcher / resolver / projection: the resolution engine
    - loader / serialization: descriptor input and graph output
    - analyzer / backends: read-only reports and diagrams
"""

__version__ = "0.1.0"
