"""Engine-wide settings."""
