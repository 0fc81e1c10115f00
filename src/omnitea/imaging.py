"""Finishing rendered pages for display in chat.

Pipeline
--------
1. Trim:   crops away the page border, i.e. every edge row and column
           that has the same colour as the top-left pixel.  Small pages
           are mostly margin; without trimming the formula is a speck in
           the middle of a white card.

2. Negate: inverts the RGB channels (alpha untouched) so black-on-white
           text becomes white-on-black and sits naturally in Discord's
           dark theme.

Uses only Pillow.
"""

import io

from PIL import Image, ImageChops, ImageOps


def trim(img: Image.Image) -> Image.Image:
    """Crop away the uniform border around *img*.

    A fully uniform image has nothing to keep and is returned unchanged.
    """
    rgb = img.convert("RGB")
    background = Image.new("RGB", rgb.size, rgb.getpixel((0, 0)))
    bbox = ImageChops.difference(rgb, background).getbbox()
    if bbox is None:
        return img
    return img.crop(bbox)


def negate(img: Image.Image) -> Image.Image:
    """Invert the colour channels, keeping any alpha channel as it is."""
    if img.mode == "RGBA":
        r, g, b, a = img.split()
        inverted = ImageOps.invert(Image.merge("RGB", (r, g, b)))
        return Image.merge("RGBA", (*inverted.split(), a))
    return ImageOps.invert(img.convert("RGB"))


def trim_and_negate(image_bytes: bytes, negate_colours: bool = True) -> bytes:
    """Run the page finishing pipeline and return the result as PNG bytes."""
    img = Image.open(io.BytesIO(image_bytes))
    img.load()

    img = trim(img)
    if negate_colours:
        img = negate(img)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
