"""
GlyphLab Configuration Management.
==================================

This module defines the tuning space for the GlyphLab knob interface.
The parameters are organized into the same "Layer Cake" model as the
runtime: perception feeds interpretation, interpretation drives the knob,
the knob drives the mesh.

! WARNING !
Changing `MODE_LABELS` changes the knob's click order. The order is part of
the interaction contract (one click = one neighbour).
Changing Mesh Layers changes the glyph on the next regeneration.
"""

import math

# --- MODE DEFINITIONS (CRITICAL) ---
# Cyclic knob order. Rotating one step clockwise moves to the next entry,
# rotating past the last entry wraps back to the first.
MODE_LABELS = [
    "Shape",        # Silhouette selection (no parameter bound)
    "Stroke",       # Drives extrusion depth
    "Handles",      # Reserved for contour handles (no parameter bound)
    "Interpolate",  # Reserved for glyph interpolation (no parameter bound)
    "Noise",        # Drives vertex displacement
    "Texture",      # Drives bevel size and hue
]

# --- MASTER CONFIGURATION ---
CONFIG = {
    # =========================================================
    # LAYER 1: PERCEPTION (MediaPipe Hands + Camera)
    # =========================================================
    "CAMERA_INDEX": 0,              # OpenCV device ID
    "TARGET_FPS": 30,               # Hardware limit for Camera
    "FRAME_WIDTH": 1280,            # Capture width request
    "FRAME_HEIGHT": 720,            # Capture height request
    "MAX_NUM_HANDS": 1,             # Knob is a one-hand gesture
    "MIN_DETECTION_CONFIDENCE": 0.6,
    "MIN_TRACKING_CONFIDENCE": 0.6,
    "MODEL_COMPLEXITY": 1,          # 0=Fast, 1=Balanced
    "LANDMARK_COUNT": 21,           # Points per hand

    # =========================================================
    # LAYER 2: PINCH INTERPRETER (The Knob Reader)
    # =========================================================
    "THUMB_TIP": 4,                 # Landmark index of the thumb tip
    "INDEX_TIP": 8,                 # Landmark index of the index tip
    "PINCH_THRESHOLD": 0.05,        # Normalized thumb-index distance for a pinch
    "CONFIDENCE_PINCHING": 0.9,     # Coarse UI signal while pinching
    "CONFIDENCE_TRACKING": 0.6,     # Hand visible, no pinch
    "CONFIDENCE_ABSENT": 0.0,       # No hand
    "SURFACE_WIDTH": 1280,          # Pixel reference frame for the centroid
    "SURFACE_HEIGHT": 720,
    "WRAP_AWARE_DELTA": False,      # Fold deltas across the +-pi seam (off = raw difference)

    # =========================================================
    # LAYER 3: KNOB STATE MACHINE (Mode Clicks)
    # =========================================================
    "MODE_STEP_ANGLE": math.pi / 4, # Radians of rotation per mode click
    "DEFAULT_MODE": "Shape",
    "DEFAULT_PARAMETERS": {
        "stroke": 0.5,
        "noise": 0.0,
        "texture": 0.3,
    },

    # =========================================================
    # LAYER 4: TRAIL (Glow Feedback)
    # =========================================================
    "TRAIL_CAPACITY": 60,           # Points kept for the glow trail

    # =========================================================
    # LAYER 5: GLYPH MESH (The Counterform)
    # =========================================================
    "OUTER_HALF_WIDTH": 1.0,        # Rectangle contour, model units
    "OUTER_HALF_HEIGHT": 1.4,
    "HOLE_RADIUS_X": 0.6,           # Elliptical counterform
    "HOLE_RADIUS_Y": 0.9,
    "CURVE_SEGMENTS": 64,           # Samples around the counterform
    "EXTRUDE_BASE_DEPTH": 0.4,      # depth = base + stroke * gain
    "EXTRUDE_STROKE_GAIN": 0.2,
    "EXTRUDE_STEPS": 2,             # Body slices between the bevels
    "BEVEL_BASE": 0.08,             # size = thickness = base + texture * gain
    "BEVEL_TEXTURE_GAIN": 0.04,
    "BEVEL_SEGMENTS": 8,

    # --- NOISE DISPLACEMENT ---
    "NOISE_SEED": "glyph",          # Fixed seed keeps regeneration reproducible
    "NOISE_SCALE": 0.5,             # Position -> noise space
    "NOISE_AMPLITUDE": 0.12,        # Max displacement per unit noise
    "NOISE_ACTIVE_THRESHOLD": 0.01, # Below this the pass is skipped (unless in Noise mode)

    # =========================================================
    # LAYER 6: MATERIAL (Cosmetic)
    # =========================================================
    "HUE_BASE": 0.58,
    "HUE_TEXTURE_GAIN": 0.1,
    "SATURATION": 0.7,
    "LIGHTNESS": 0.55,
    "METALNESS": 0.1,
    "ROUGHNESS": 0.2,

    # =========================================================
    # LAYER 7: CONSOLE & RUNTIME
    # =========================================================
    "CONSOLE_INTERVAL_S": 1.0,      # Re-run period for a live console script
    "CONSOLE_MAX_SCRIPT_CHARS": 2000,
    "CONSOLE_MAX_EXPR_DEPTH": 64,   # Operator nesting per expression (keeps evaluation shallow)
    "PREVIEW_SPIN_Y": 0.2,          # rad/s, glyph preview rotation
    "PREVIEW_SPIN_X": 0.1,
    "LOG_LEVEL": "INFO",
}
