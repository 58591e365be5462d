from .construction_assembly import (
    SurfaceRoughness,
    MaterialLayer,
    Construction
)
