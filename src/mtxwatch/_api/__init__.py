"""Endpoint modules for the MediaMTX control API and playback probes.

Internal to mtxwatch; use :class:`mtxwatch.client.MediaMtxClient`.
"""
