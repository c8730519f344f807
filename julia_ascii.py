from ExampleSceneDef import JuliaExample
from cli import render

if __name__ == '__main__':
    render(JuliaExample(width=200, height=100))
