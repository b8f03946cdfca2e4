"""Entrypoints for HSV segmentation."""
