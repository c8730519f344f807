from ExampleSceneDef import SphereTileExample
from cli import render

if __name__ == '__main__':
    render(SphereTileExample(width=320, height=160), output_path="sphere_tile.png")
