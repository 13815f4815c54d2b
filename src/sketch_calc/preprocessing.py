"""Optional preprocessing of the exported raster before upload.

The surface is transparent where nothing has been drawn; the page shows it
on a solid background colour, but the exported PNG does not carry that
colour.  Recognition services that ignore alpha then see light strokes on
whatever colour transparent pixels decode to.  This pipeline produces the
image the user actually sees.  It uses only Pillow.

Pipeline
--------
1. Flatten:       composite the RGBA raster over the surface background
                  colour and drop the alpha channel.

2. Unsharp mask:  sharpens stroke edges softened by anti-aliasing without
                  amplifying the flat background.

Not applied by default: the evaluation service contract is defined on the
raster as drawn.
"""

import io

from PIL import Image, ImageColor, ImageFilter


def preprocess_for_upload(image_bytes: bytes, background: str = "black") -> bytes:
    """Run the preprocessing pipeline and return the result as PNG bytes."""
    with Image.open(io.BytesIO(image_bytes)) as src:
        img = src.convert("RGBA")

    # Step 1: flatten onto the background
    base = Image.new("RGBA", img.size, ImageColor.getcolor(background, "RGBA"))
    img = Image.alpha_composite(base, img).convert("RGB")

    # Step 2: unsharp mask
    # radius=1.5: on the scale of a 3 px stroke; does not thicken it
    # threshold=3: leaves the flat background untouched
    img = img.filter(ImageFilter.UnsharpMask(radius=1.5, percent=150, threshold=3))

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
