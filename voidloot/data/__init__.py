"""Voidloot data layer: catalog models and loaders."""
