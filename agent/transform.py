# agent/transform.py
import math

# ---- Angles ---------------------------------------------------------------

def wrap_pi(a: float) -> float:
    """Wrap radians into [-pi, pi]."""
    return ((a + math.pi) % (2 * math.pi)) - math.pi

def deg_to_rad(d: float) -> float:
    return math.radians(d)

# ---- Voxel space (X east, Y up, Z south) ----------------------------------
# Yaw rotates around +Y; yaw=0 faces north (-Z); +yaw turns toward west.
# Pitch rotates around the local right axis; +pitch looks up.

def forward_vector(yaw_rad: float, pitch_rad: float) -> tuple[float, float, float]:
    """
    3D forward with pitch in voxel space:
      X = -sin(yaw) * cos(pitch)
      Y =  sin(pitch)
      Z = -cos(yaw) * cos(pitch)
    """
    sh, ch = math.sin(yaw_rad), math.cos(yaw_rad)
    cp, sp = math.cos(pitch_rad), math.sin(pitch_rad)
    return (-sh * cp, sp, -ch * cp)

def look_angles(eye: tuple[float, float, float], point: tuple[float, float, float]) -> tuple[float, float]:
    """Yaw/pitch (radians) that point ``forward_vector`` from ``eye`` at ``point``."""
    dx = point[0] - eye[0]
    dy = point[1] - eye[1]
    dz = point[2] - eye[2]
    flat = math.hypot(dx, dz)
    if flat < 1e-9 and abs(dy) < 1e-9:
        return 0.0, 0.0
    yaw = math.atan2(-dx, -dz) if flat >= 1e-9 else 0.0
    pitch = math.atan2(dy, flat)
    return wrap_pi(yaw), pitch

def voxel_center(coord: tuple[int, int, int]) -> tuple[float, float, float]:
    return (coord[0] + 0.5, coord[1] + 0.5, coord[2] + 0.5)

def distance(a: tuple[float, float, float], b: tuple[float, float, float]) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)
