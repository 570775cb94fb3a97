"""Disk-backed caches shared by the remote update scripts."""
