"""
GlyphLab Perception Session.
Scoped acquisition of the camera and the hand model: both are released on
every exit path, including a failure while the model is still loading.
"""
import logging
from contextlib import ExitStack, contextmanager
from typing import Callable, Optional

from glyphlab.vision.landmark_adapter import LandmarkStreamAdapter


def _default_camera(index):
    # cv2 is only needed once a real camera is opened
    from glyphlab.vision.camera import ThreadedCamera
    return ThreadedCamera(index)


@contextmanager
def perception_session(camera_index: Optional[int] = None,
                       camera_factory: Callable = _default_camera,
                       adapter_factory: Callable = LandmarkStreamAdapter):
    """
    Yields (camera, adapter).

    Usage:
        with perception_session() as (cam, adapter):
            ok, frame = cam.read()
    """
    with ExitStack() as stack:
        camera = stack.enter_context(camera_factory(camera_index))
        adapter = stack.enter_context(adapter_factory())
        logging.info("📷 Perception online")
        try:
            yield camera, adapter
        finally:
            logging.info("📷 Perception released")
