"""Voxel storage, scene loading and the in-process sandbox world."""
