"""Camera status layer.

Probe outcomes and relay path listings meet here: :mod:`.events` normalises
probes, :mod:`.policy` folds them into health records, and :mod:`.store`
owns the resulting per-camera view.
"""
