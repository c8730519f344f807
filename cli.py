import os
from utils import to_ascii

"""
Output side of the demo scripts: sends a rendered scene to the terminal or a file.
"""


def render(scene, output_path=None, processes=None):
    """Render an ExampleSceneDef.

    With no output_path the image is printed as ASCII art, otherwise it is
    saved in whatever format the file extension names.
    """
    if processes is None:
        processes = os.cpu_count()
    pix = scene.render(output_path=output_path, processes=processes, verbose=True)
    if output_path is None:
        print(to_ascii(pix))
    return pix
