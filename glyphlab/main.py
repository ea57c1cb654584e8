"""
GlyphLab - Main Entry Point.
===========================

Bootloader for the gestural glyph editor. Wires the layers together:
1. Perception (Camera thread + MediaPipe Hands, scoped).
2. Interpretation + Knob (GlyphController).
3. Geometry (AsyncMeshBuilder, latest-wins).
4. Feedback (HUD + glyph preview).

Usage:
    $ python -m glyphlab.main
    $ python -m glyphlab.main --console "noise = noise + 0.05"
"""
import argparse
import logging
import time

import cv2

from glyphlab.config import CONFIG
from glyphlab.control.console import ParameterConsole
from glyphlab.control.controller import GlyphController
from glyphlab.core.errors import ConsoleError, PerceptionError
from glyphlab.geometry.mesh_builder import AsyncMeshBuilder
from glyphlab.ui.hud import HUD
from glyphlab.vision.session import perception_session


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Pinch + rotate to change modes and tweak your glyph.")
    parser.add_argument("--camera", type=int, default=CONFIG["CAMERA_INDEX"], help="OpenCV device ID")
    parser.add_argument("--console", default="", help="Parameter script re-run every CONSOLE_INTERVAL_S")
    return parser.parse_args(argv)


def main(argv=None):
    """
    Main Event Loop.
    """
    args = parse_args(argv)
    logging.basicConfig(level=CONFIG["LOG_LEVEL"], format="%(asctime)s %(levelname)s %(message)s")

    console = None
    if args.console:
        try:
            console = ParameterConsole(args.console)
        except ConsoleError as exc:
            logging.error(f"❌ Console script rejected: {exc}")
            return 2

    # 1. Boot Sequence
    print("🚀 GLYPH LAB: ONLINE")
    print("   -> Pinch + rotate to click through modes")
    print("   -> Press 'ESC' to Exit")
    print("   -> Press 'V' to Toggle Visuals")

    hud = HUD()
    window_name = "GlyphLab"
    glyph_window = "GlyphLab Glyph"
    show_visuals = True
    start_time = time.time()
    prev_time = 0
    last_console_run = 0.0

    try:
        with perception_session(args.camera) as (cam, adapter), AsyncMeshBuilder() as builder:
            controller = GlyphController(mesh_builder=builder)

            while True:
                # --- 1. PERCEPTION ---
                ret, frame = cam.read()
                if not ret or frame is None:
                    if not cam.running:
                        logging.error("❌ Camera stream ended")
                        return 1
                    continue

                # Flip horizontal for mirror effect; MediaPipe requires RGB
                frame = cv2.flip(frame, 1)
                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                hand = adapter.process(rgb)

                # --- 2. KNOB ---
                controller.process(hand)

                # --- 2b. CONSOLE (timer driven) ---
                now = time.time()
                if console and (now - last_console_run) > CONFIG["CONSOLE_INTERVAL_S"]:
                    last_console_run = now
                    try:
                        controller.set_parameters(console.run(controller.state.params))
                    except ConsoleError as exc:
                        logging.warning(f"⚠️ Console run skipped: {exc}")

                # --- 3. FEEDBACK ---
                if show_visuals:
                    hud.render(frame, controller.overlay_snapshot(), controller.state.params,
                               hand, controller.message)

                fps = 1 / (now - prev_time) if (now - prev_time) > 0 else 0
                prev_time = now
                hud.draw_fps(frame, fps)

                cv2.imshow(window_name, frame)
                cv2.imshow(glyph_window, hud.render_glyph(controller.mesh, now - start_time))

                # Input Handling
                k = cv2.waitKey(1)
                if k == 27:
                    break  # ESC
                elif k == ord('v'):
                    show_visuals = not show_visuals
    except PerceptionError as exc:
        logging.error(f"❌ {exc}")
        return 1
    finally:
        cv2.destroyAllWindows()
        print("🔴 GLYPH LAB OFFLINE")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
