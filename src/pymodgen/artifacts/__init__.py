"""Expanded tree output and its manifests."""
