"""
Local prediction engine.

Rebuilds a finished resource's predictive structure from its JSON and
evaluates predictions in-process, reproducing the remote service's output.
"""
