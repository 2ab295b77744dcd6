"""
End-to-end demonstration of a Paint By Neon session.

Builds a synthetic photo, runs the upload pipeline, paints a few strokes,
undoes one, then saves the project and exports the painting into a
temporary directory. Timing is printed for the upload step.

Run:
    python examples/paint_session_demo.py [optional/path/to/photo.png]
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
import random
import tempfile
import time

import numpy as np

from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.ImageEditingLib.pixel_codec import encode_pixel_buffer
from PBN_Libs.session import PaintSession


def synthetic_photo(width=320, height=240):
    """Diagonal color gradient with a bright disc in the middle."""
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, 0] = (xs * 255 // max(width - 1, 1)).astype(np.uint8)
    pixels[:, :, 1] = (ys * 255 // max(height - 1, 1)).astype(np.uint8)
    pixels[:, :, 2] = 128
    pixels[:, :, 3] = 255

    disc = (xs - width // 2) ** 2 + (ys - height // 2) ** 2 < (min(width, height) // 5) ** 2
    pixels[disc, :3] = (250, 240, 60)
    return PixelBuffer(width, height, pixels)


def main():
    """Run the demo session."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if len(sys.argv) > 1:
        data = Path(sys.argv[1]).read_bytes()
    else:
        data = encode_pixel_buffer(synthetic_photo())

    with tempfile.TemporaryDirectory() as tmpdir:
        output_dir = Path(tmpdir)
        session = PaintSession(rng=random.Random(0))
        try:
            start = time.time()
            result = session.upload_image(data)
            print(f"Upload: {result.message} ({time.time() - start:.3f}s)")
            if not result.success:
                return 1

            print(f"Palette: {', '.join(session.palette)}")

            session.set_brush(color=session.palette[0], size=12, opacity=0.8)
            session.pointer_down(20, 20)
            session.pointer_move(120, 60)
            session.pointer_up()

            session.set_active_layer(2)
            session.set_brush(tool="spray", size=20, opacity=0.5)
            for x in range(60, 200, 10):
                session.pointer_down(x, 150)
                session.pointer_move(x, 150)
                session.pointer_up()

            session.undo()
            print(f"History: {len(session.history)} entries, step {session.history.step}")
            print(f"Pixels matching brush color: {session.matching_pixel_count()}")

            saved = session.save_project_to(output_dir)
            print(f"Save: {saved.message}")

            exported = session.export_to(output_dir)
            print(f"Export: {exported.message}")

            for path in sorted(output_dir.iterdir()):
                print(f"  {path.name}: {path.stat().st_size} bytes")
        finally:
            session.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
